"""Categories API routes."""
from fastapi import APIRouter, status

from bookstore.core.deps import DbDep, LifecycleDep
from bookstore.core.exceptions import NotFoundException
from bookstore.schemas.category import Category, CategoryCreate, CategoryDetail
from bookstore.schemas.common import ApiResponse
from bookstore.services.catalog_repository import CatalogRepository

router = APIRouter()


@router.get("", response_model=ApiResponse[list[Category]])
async def list_categories(db: DbDep):
    categories = await CatalogRepository(db).list_categories()
    return ApiResponse(data=[Category.model_validate(c) for c in categories])


@router.get("/{category_id}", response_model=ApiResponse[CategoryDetail])
async def get_category(category_id: str, db: DbDep):
    category = await CatalogRepository(db).get_category(category_id, with_books=True)
    if not category:
        raise NotFoundException("Category not found")
    return ApiResponse(data=CategoryDetail.model_validate(category))


@router.post("", response_model=ApiResponse[Category], status_code=status.HTTP_201_CREATED)
async def create_category(category_data: CategoryCreate, lifecycle: LifecycleDep):
    category = await lifecycle.create_category(category_data.title)
    return ApiResponse(data=Category.model_validate(category))
