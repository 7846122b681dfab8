"""Category schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bookstore.schemas.book import BookPublic


class CategoryCreate(BaseModel):
    """Category creation schema."""

    title: str = Field(..., min_length=1, max_length=255)


class Category(BaseModel):
    """Category response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    created_at: datetime


class CategoryDetail(Category):
    """Category with resolved book references."""

    books: list[BookPublic] = []
