"""Catalog repository: Book, Author and Category persistence."""
import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookstore.core.exceptions import NotFoundException, PersistenceError
from bookstore.models.author import Author
from bookstore.models.book import Book
from bookstore.models.category import Category

logger = logging.getLogger(__name__)


class CatalogRepository:
    """CRUD over the catalog collections for one session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Books

    async def get_book(self, book_id: str) -> Book | None:
        result = await self.db.execute(select(Book).where(Book.id == book_id))
        return result.unique().scalar_one_or_none()

    async def get_book_or_404(self, book_id: str) -> Book:
        book = await self.get_book(book_id)
        if not book:
            raise NotFoundException("Book not found")
        return book

    async def list_books_by_author(self, author_id: str) -> Sequence[Book]:
        result = await self.db.execute(
            select(Book).where(Book.author_id == author_id).order_by(Book.created_at)
        )
        return result.unique().scalars().all()

    async def list_all_books(self) -> Sequence[Book]:
        result = await self.db.execute(select(Book))
        return result.unique().scalars().all()

    # Authors

    async def get_author(self, author_id: str, with_books: bool = False) -> Author | None:
        query = select(Author).where(Author.id == author_id)
        if with_books:
            query = query.options(selectinload(Author.books))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_author_or_404(self, author_id: str, with_books: bool = False) -> Author:
        author = await self.get_author(author_id, with_books=with_books)
        if not author:
            raise NotFoundException("Author not found")
        return author

    async def find_author_by_name(self, name: str) -> Author | None:
        result = await self.db.execute(select(Author).where(Author.name == name))
        return result.scalar_one_or_none()

    async def list_authors(self) -> Sequence[Author]:
        result = await self.db.execute(select(Author).order_by(Author.name))
        return result.scalars().all()

    # Categories

    async def get_category(self, category_id: str, with_books: bool = False) -> Category | None:
        query = select(Category).where(Category.id == category_id)
        if with_books:
            query = query.options(selectinload(Category.books))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_category_by_title(self, title: str) -> Category | None:
        result = await self.db.execute(select(Category).where(Category.title == title))
        return result.scalar_one_or_none()

    async def list_categories(self) -> Sequence[Category]:
        result = await self.db.execute(select(Category).order_by(Category.title))
        return result.scalars().all()

    # Unit of work

    def add(self, instance) -> None:
        self.db.add(instance)

    async def delete(self, instance) -> None:
        await self.db.delete(instance)

    async def flush(self) -> None:
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Flush failed: {e}")
            raise PersistenceError(f"Failed to write catalog changes: {e}") from e

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Commit failed: {e}")
            await self.db.rollback()
            raise PersistenceError(f"Failed to commit catalog changes: {e}") from e

    async def rollback(self) -> None:
        await self.db.rollback()

    async def refresh(self, instance) -> None:
        await self.db.refresh(instance)
