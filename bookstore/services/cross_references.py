"""
Cross-Reference Maintainer
Propagates Book and Author deletion to carts, favorites and the blob store.

Category and Author back-references are derived from the Book's foreign
keys, so removing the Book row removes it from both lists. Order lines keep
their purchase-time snapshot and are left untouched.
"""

import asyncio
import logging
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.models.book import Book
from bookstore.models.cart import CartItem
from bookstore.models.favorites import FavoriteItem
from bookstore.services.asset_store import AssetStore

logger = logging.getLogger(__name__)


class CrossReferenceMaintainer:
    """Cascades catalog deletions to dependent records and blobs."""

    def __init__(self, db: AsyncSession, assets: AssetStore):
        self.db = db
        self.assets = assets

    async def detach_from_carts(self, book_ids: List[str]) -> int:
        """Pull every cart line referencing the given books."""
        if not book_ids:
            return 0
        result = await self.db.execute(delete(CartItem).where(CartItem.book_id.in_(book_ids)))
        return result.rowcount or 0

    async def detach_from_favorites(self, book_ids: List[str]) -> int:
        """Pull every favorites entry referencing the given books."""
        if not book_ids:
            return 0
        result = await self.db.execute(delete(FavoriteItem).where(FavoriteItem.book_id.in_(book_ids)))
        return result.rowcount or 0

    async def detach_books(self, book_ids: List[str]) -> None:
        carts = await self.detach_from_carts(book_ids)
        favorites = await self.detach_from_favorites(book_ids)
        logger.info(
            f"Detached {len(book_ids)} book(s): {carts} cart line(s), {favorites} favorite(s)"
        )

    async def delete_assets(self, urls: List[Optional[str]]) -> int:
        """Delete blobs concurrently; already-absent blobs count as deleted.

        Raises:
            StorageDeleteError: The first non not-found failure, after every
                deletion has settled
        """
        targets = [url for url in urls if url]
        results = await asyncio.gather(
            *(self.assets.discard(url) for url in targets),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                raise result
        return sum(1 for result in results if result is True)

    async def delete_book_assets(self, book: Book) -> int:
        return await self.delete_assets([book.source_asset, book.cover_asset, book.sample_asset])

