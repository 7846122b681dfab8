"""Author model."""
import uuid
from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore.database import Base


class Author(Base):
    """Author model.

    ``books`` is the reverse index of ``Book.author_id``; it is never
    written directly.
    """

    __tablename__ = "authors"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    image_asset: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    # Relationships (load explicitly with selectinload)
    books = relationship(
        "Book",
        back_populates="author",
        order_by="Book.created_at",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Author {self.name}>"
