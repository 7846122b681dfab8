"""Category model."""
import uuid
from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore.database import Base


class Category(Base):
    """Book category."""

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)

    # Relationships
    books = relationship(
        "Book",
        back_populates="category",
        order_by="Book.created_at",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Category {self.title}>"
