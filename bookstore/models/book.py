"""Book model."""
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore.database import Base


class Book(Base):
    """Book model.

    ``sale_price`` is derived from ``list_price`` and ``discount_percent``
    and is only ever written by the lifecycle service.
    """

    __tablename__ = "books"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    list_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    discount_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        default=Decimal("0"),
        nullable=False,
    )
    # 2-place price times a 4-place factor: six places hold it exactly
    sale_price: Mapped[Decimal] = mapped_column(Numeric(16, 6), nullable=False, index=True)
    author_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("authors.id"),
        nullable=False,
        index=True,
    )
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )

    # Asset slots
    source_asset: Mapped[str] = mapped_column(String(1000), nullable=False)  # privileged
    cover_asset: Mapped[str] = mapped_column(String(1000), nullable=False)
    sample_asset: Mapped[str] = mapped_column(String(1000), nullable=False)

    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    # Relationships
    author = relationship("Author", back_populates="books", lazy="joined")
    category = relationship("Category", back_populates="books", lazy="joined")

    __table_args__ = (
        Index("ix_book_author_created", "author_id", "created_at"),
    )

    @property
    def author_name(self) -> str | None:
        return self.author.name if self.author else None

    @property
    def category_title(self) -> str | None:
        return self.category.title if self.category else None

    def __repr__(self) -> str:
        return f"<Book {self.title}>"
