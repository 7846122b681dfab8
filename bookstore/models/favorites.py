"""Favorites models."""
import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore.database import Base


class Favorites(Base):
    """Per-user favorites list."""

    __tablename__ = "favorites"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)

    # Relationships
    items = relationship("FavoriteItem", back_populates="favorites", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Favorites {self.user_id}>"


class FavoriteItem(Base):
    """Favorites entry."""

    __tablename__ = "favorite_items"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    favorites_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("favorites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    book_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("books.id"),
        nullable=False,
        index=True,
    )
    added_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)

    # Relationships
    favorites = relationship("Favorites", back_populates="items")
