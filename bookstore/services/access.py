"""Access projection: hide the full book file from readers who have not bought it."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookstore.models.book import Book
from bookstore.models.order import Order
from bookstore.schemas.book import BookDetail, BookPublic

logger = logging.getLogger(__name__)


async def has_purchased(db: AsyncSession, requester_id: str, book_id: str) -> bool:
    """Check whether any of the requester's orders contains the book.

    Linear scan over the requester's orders and their lines, stopping at the
    first match. O(orders x items) per call, which is fine at catalog scale.
    """
    result = await db.execute(
        select(Order).where(Order.user_id == requester_id).options(selectinload(Order.items))
    )
    for order in result.scalars():
        for item in order.items:
            if item.book_id == book_id:
                return True
    return False


def project_book(book: Book, entitled: bool) -> BookPublic:
    """Build the representation a reader may see.

    ``cover_asset`` and ``sample_asset`` are always visible; ``source_asset``
    only when ``entitled``.
    """
    if entitled:
        return BookDetail.model_validate(book)
    return BookPublic.model_validate(book)


async def project_for_requester(
    db: AsyncSession,
    book: Book,
    requester_id: str | None,
) -> BookPublic:
    """Project a book for an optional requester."""
    entitled = False
    if requester_id:
        entitled = await has_purchased(db, requester_id, book.id)
    logger.debug(f"Book {book.id} requested by {requester_id or 'anonymous'}, entitled={entitled}")
    return project_book(book, entitled)
