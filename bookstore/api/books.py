"""Books API routes."""
from decimal import Decimal

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from bookstore.config import settings
from bookstore.core.deps import DbDep, LifecycleDep, RequesterDep, read_upload
from bookstore.schemas.book import BookCreate, BookDetail, BookPage, BookPublic, BookQuery, BookUpdate, SortBy
from bookstore.schemas.common import ApiResponse
from bookstore.services.access import project_book, project_for_requester
from bookstore.services.book_query import search_books
from bookstore.services.catalog_repository import CatalogRepository
from bookstore.services.lifecycle import BookFiles

router = APIRouter()


@router.get("", response_model=ApiResponse[BookPage])
async def list_books(
    db: DbDep,
    author: str | None = None,
    category: str | None = None,
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    search: str | None = None,
    sort_by: SortBy = "default",
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
):
    """List catalog books with filters, sorting and pagination."""
    params = BookQuery(
        author=author,
        category=category,
        min_price=min_price,
        max_price=max_price,
        search=search,
        sort_by=sort_by,
        page=page,
        limit=limit,
    )
    return ApiResponse(data=await search_books(db, params))


@router.get("/all", response_model=ApiResponse[list[BookPublic]])
async def list_all_books(db: DbDep):
    """List every book, without source files."""
    books = await CatalogRepository(db).list_all_books()
    return ApiResponse(data=[project_book(book, entitled=False) for book in books])


@router.get("/{book_id}", response_model=ApiResponse[BookDetail | BookPublic])
async def get_book(
    book_id: str,
    db: DbDep,
    requester: RequesterDep,
):
    """Get book details; the source file is only included for buyers."""
    book = await CatalogRepository(db).get_book_or_404(book_id)
    projection = await project_for_requester(db, book, requester.id if requester else None)
    return ApiResponse(data=projection)


@router.post("", response_model=ApiResponse[BookDetail], status_code=status.HTTP_201_CREATED)
async def create_book(
    lifecycle: LifecycleDep,
    title: str = Form(..., min_length=1, max_length=500),
    list_price: Decimal = Form(..., ge=0, decimal_places=2),
    category: str = Form(..., min_length=1),
    author_name: str = Form(..., min_length=1),
    description: str | None = Form(None),
    discount_percent: Decimal = Form(Decimal("0"), ge=0, le=100, decimal_places=2),
    source: UploadFile | None = File(None),
    cover: UploadFile | None = File(None),
    sample: UploadFile | None = File(None),
):
    """Create a book from its fields and its three files."""
    data = BookCreate(
        title=title,
        description=description,
        list_price=list_price,
        discount_percent=discount_percent,
        category=category,
        author_name=author_name,
    )
    files = BookFiles(
        source=await read_upload(source),
        cover=await read_upload(cover),
        sample=await read_upload(sample),
    )
    book = await lifecycle.create_book(data, files)
    return ApiResponse(data=BookDetail.model_validate(book))


@router.patch("/{book_id}", response_model=ApiResponse[BookDetail])
async def update_book(
    book_id: str,
    lifecycle: LifecycleDep,
    title: str | None = Form(None, min_length=1, max_length=500),
    description: str | None = Form(None),
    list_price: Decimal | None = Form(None, ge=0, decimal_places=2),
    discount_percent: Decimal | None = Form(None, ge=0, le=100, decimal_places=2),
    category: str | None = Form(None, min_length=1),
    author_name: str | None = Form(None, min_length=1),
    source: UploadFile | None = File(None),
    cover: UploadFile | None = File(None),
    sample: UploadFile | None = File(None),
):
    """Update book fields and replace any submitted files."""
    submitted = {
        "title": title,
        "description": description,
        "list_price": list_price,
        "discount_percent": discount_percent,
        "category": category,
        "author_name": author_name,
    }
    data = BookUpdate(**{k: v for k, v in submitted.items() if v is not None})
    files = BookFiles(
        source=await read_upload(source),
        cover=await read_upload(cover),
        sample=await read_upload(sample),
    )
    book = await lifecycle.update_book(book_id, data, files)
    return ApiResponse(data=BookDetail.model_validate(book))


@router.delete("/{book_id}", response_model=ApiResponse[dict])
async def delete_book(book_id: str, lifecycle: LifecycleDep):
    """Delete a book with its files and cart/favorites entries."""
    await lifecycle.delete_book(book_id)
    return ApiResponse(data={"deleted": True})
