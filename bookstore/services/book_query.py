"""Catalog query engine: filter, sort and paginate books."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.models.author import Author
from bookstore.models.book import Book
from bookstore.models.category import Category
from bookstore.schemas.book import BookPage, BookQuery
from bookstore.services.access import project_book


def build_book_filter(params: BookQuery):
    """Build the filtered (unsorted) book query."""
    query = select(Book)

    if params.author:
        query = query.where(Book.author_id.in_(select(Author.id).where(Author.name == params.author)))
    if params.category:
        query = query.where(
            Book.category_id.in_(select(Category.id).where(Category.title == params.category))
        )
    if params.min_price is not None:
        query = query.where(Book.sale_price >= params.min_price)
    if params.max_price is not None:
        query = query.where(Book.sale_price <= params.max_price)
    if params.search:
        query = query.where(func.lower(Book.title).contains(params.search.lower(), autoescape=True))
    if params.sort_by == "on-sale":
        query = query.where(Book.discount_percent > 0)

    return query


def apply_sort(query, sort_by: str):
    """Apply the ordering for ``sort_by``; ``default`` keeps store order."""
    if sort_by == "oldest":
        return query.order_by(Book.created_at.asc())
    if sort_by == "newest":
        return query.order_by(Book.created_at.desc())
    if sort_by in ("on-sale", "price-low-to-high"):
        return query.order_by(Book.sale_price.asc(), Book.created_at.asc())
    if sort_by == "price-high-to-low":
        return query.order_by(Book.sale_price.desc(), Book.created_at.asc())
    return query


async def search_books(db: AsyncSession, params: BookQuery) -> BookPage:
    """List books matching ``params``, one page at a time.

    Listing never exposes the source file, whoever asks.
    """
    query = build_book_filter(params)

    # Count total
    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    # Apply sorting and pagination
    query = apply_sort(query, params.sort_by)
    query = query.offset((params.page - 1) * params.limit).limit(params.limit)
    result = await db.execute(query)
    books = result.unique().scalars().all()

    return BookPage(
        items=[project_book(book, entitled=False) for book in books],
        total=total,
        current_page=params.page,
        limit=params.limit,
        total_pages=(total + params.limit - 1) // params.limit,
    )
