"""Authors API routes."""
from fastapi import APIRouter, File, Form, UploadFile, status

from bookstore.core.deps import DbDep, LifecycleDep, read_upload
from bookstore.schemas.author import Author, AuthorDetail, AuthorUpdate
from bookstore.schemas.common import ApiResponse
from bookstore.services.catalog_repository import CatalogRepository

router = APIRouter()


@router.get("", response_model=ApiResponse[list[Author]])
async def list_authors(db: DbDep):
    """List all authors."""
    authors = await CatalogRepository(db).list_authors()
    return ApiResponse(data=[Author.model_validate(a) for a in authors])


@router.get("/{author_id}", response_model=ApiResponse[AuthorDetail])
async def get_author(author_id: str, db: DbDep):
    """Get an author with their books."""
    author = await CatalogRepository(db).get_author_or_404(author_id, with_books=True)
    return ApiResponse(data=AuthorDetail.model_validate(author))


@router.post("", response_model=ApiResponse[Author], status_code=status.HTTP_201_CREATED)
async def create_author(
    lifecycle: LifecycleDep,
    name: str | None = Form(None),
    image: UploadFile | None = File(None),
):
    """Create an author, optionally with a portrait."""
    author = await lifecycle.create_author(name, await read_upload(image))
    return ApiResponse(data=Author.model_validate(author))


@router.patch("/{author_id}", response_model=ApiResponse[Author])
async def update_author(
    author_id: str,
    lifecycle: LifecycleDep,
    name: str | None = Form(None),
    image: UploadFile | None = File(None),
):
    """Rename an author and/or replace the portrait."""
    data = AuthorUpdate(name=name) if name is not None else AuthorUpdate()
    author = await lifecycle.update_author(author_id, data, await read_upload(image))
    return ApiResponse(data=Author.model_validate(author))


@router.delete("/{author_id}", response_model=ApiResponse[dict])
async def delete_author(author_id: str, lifecycle: LifecycleDep):
    """Delete an author together with all of their books."""
    await lifecycle.delete_author(author_id)
    return ApiResponse(data={"deleted": True})
