"""Author schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bookstore.schemas.book import BookPublic


class AuthorUpdate(BaseModel):
    """Author update schema."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=255)


class Author(BaseModel):
    """Author response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    image_asset: str | None
    created_at: datetime
    updated_at: datetime


class AuthorDetail(Author):
    """Author with resolved book references."""

    books: list[BookPublic] = []
