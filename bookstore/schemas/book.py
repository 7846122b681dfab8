"""Book schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from bookstore.schemas.common import Money, PaginatedResponse

SortBy = Literal[
    "default",
    "oldest",
    "newest",
    "on-sale",
    "price-low-to-high",
    "price-high-to-low",
]


class BookBase(BaseModel):
    """Base book schema."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None


class BookCreate(BookBase):
    """Book creation schema.

    ``author_name`` and ``category`` must name an existing Author and
    Category.
    """

    list_price: Decimal = Field(..., ge=0, decimal_places=2)
    discount_percent: Decimal = Field(Decimal("0"), ge=0, le=100, decimal_places=2)
    category: str = Field(..., min_length=1, max_length=255)
    author_name: str = Field(..., min_length=1, max_length=255)


class BookUpdate(BaseModel):
    """Book update schema.

    Only these fields can be changed by a caller; the sale price and the
    asset URLs are owned by the lifecycle service.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = None
    list_price: Decimal | None = Field(None, ge=0, decimal_places=2)
    discount_percent: Decimal | None = Field(None, ge=0, le=100, decimal_places=2)
    category: str | None = Field(None, min_length=1, max_length=255)
    author_name: str | None = Field(None, min_length=1, max_length=255)


class BookPublic(BookBase):
    """Book representation without the privileged source file."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    list_price: Money
    discount_percent: Money
    sale_price: Money
    category: str | None = Field(None, validation_alias="category_title")
    author_name: str | None = None
    cover_asset: str
    sample_asset: str
    created_at: datetime
    updated_at: datetime


class BookDetail(BookPublic):
    """Book representation for a reader entitled to the full file."""

    source_asset: str


class BookQuery(BaseModel):
    """Catalog listing parameters."""

    author: str | None = None
    category: str | None = None
    min_price: Decimal | None = Field(None, ge=0)
    max_price: Decimal | None = Field(None, ge=0)
    search: str | None = None
    sort_by: SortBy = "default"
    page: int = Field(1, ge=1)
    limit: int = Field(12, ge=1)


BookPage = PaginatedResponse[BookPublic]
