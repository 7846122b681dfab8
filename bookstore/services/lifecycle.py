"""
Catalog Lifecycle
Creates, updates and deletes Books, Authors and Categories as single logical
operations spanning the database and the asset store.

There is no transaction across the two stores. Each operation runs as a saga:
uploads are compensated by deleting what was uploaded, database changes stay
uncommitted until every blob operation has finished, and blob deletions treat
an already-absent blob as done so a failed operation can simply be retried.
A record never keeps pointing at a blob that has been deleted: when only some
replaced blobs could be removed, those slots are switched to their new blob
before the failure is reported.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.core.exceptions import ValidationException
from bookstore.models.author import Author
from bookstore.models.book import Book
from bookstore.models.category import Category
from bookstore.schemas.author import AuthorUpdate
from bookstore.schemas.book import BookCreate, BookUpdate
from bookstore.services.asset_store import AssetStore, AssetUpload
from bookstore.services.catalog_repository import CatalogRepository
from bookstore.services.cross_references import CrossReferenceMaintainer
from bookstore.services.pricing import derive_sale_price
from bookstore.services.saga import Saga

# slot -> (namespace, Book attribute)
BOOK_SLOTS: Dict[str, Tuple[str, str]] = {
    "source": ("books", "source_asset"),
    "cover": ("covers", "cover_asset"),
    "sample": ("samples", "sample_asset"),
}


@dataclass
class BookFiles:
    """Files submitted for a Book's asset slots."""

    source: Optional[AssetUpload] = None
    cover: Optional[AssetUpload] = None
    sample: Optional[AssetUpload] = None

    def present(self) -> Dict[str, AssetUpload]:
        return {
            slot: upload
            for slot in BOOK_SLOTS
            if (upload := getattr(self, slot)) is not None
        }

    def missing(self) -> list[str]:
        return [slot for slot in BOOK_SLOTS if getattr(self, slot) is None]


class CatalogLifecycle:
    """Orchestrates catalog writes for one request."""

    def __init__(self, db: AsyncSession, assets: AssetStore):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.db = db
        self.assets = assets
        self.repo = CatalogRepository(db)
        self.references = CrossReferenceMaintainer(db, assets)

    # Asset helpers

    async def _upload_slots(self, owner_id: str, uploads: Dict[str, AssetUpload]) -> Dict[str, str]:
        """Upload several slots concurrently.

        If any upload fails, the ones that succeeded are deleted again before
        the first error is raised.
        """
        slots = list(uploads)
        results = await asyncio.gather(
            *(
                self.assets.put_upload(BOOK_SLOTS[slot][0], uploads[slot], owner_id=owner_id)
                for slot in slots
            ),
            return_exceptions=True,
        )
        urls = {slot: url for slot, url in zip(slots, results) if isinstance(url, str)}
        errors = [result for result in results if isinstance(result, Exception)]
        if errors:
            await self._discard_quietly(list(urls.values()))
            raise errors[0]
        return urls

    async def _discard_quietly(self, urls) -> None:
        """Best-effort blob cleanup used by compensation."""
        results = await asyncio.gather(
            *(self.assets.discard(url) for url in urls),
            return_exceptions=True,
        )
        for url, result in zip(urls, results):
            if isinstance(result, Exception):
                self.logger.warning(f"Orphaned asset left behind: {url} ({result})")

    async def _release_replaced(self, previous: Dict[str, Optional[str]], released: Set[str]) -> List[Exception]:
        """Delete the blobs being replaced, one slot at a time.

        Every slot whose old blob is gone afterwards (deleted now or already
        absent) is added to ``released``. Returns the errors of the slots
        whose old blob is still stored.
        """
        slots = list(previous)
        results = await asyncio.gather(
            *(self.assets.discard(previous[slot]) for slot in slots),
            return_exceptions=True,
        )
        errors = []
        for slot, result in zip(slots, results):
            if isinstance(result, Exception):
                errors.append(result)
            else:
                released.add(slot)
        return errors

    # Lookups

    async def _require_author(self, name: str) -> Author:
        author = await self.repo.find_author_by_name(name)
        if not author:
            raise ValidationException(f"Author not found: {name}")
        return author

    async def _require_category(self, title: str) -> Category:
        category = await self.repo.find_category_by_title(title)
        if not category:
            raise ValidationException(f"Category not found: {title}")
        return category

    # Books

    async def create_book(self, data: BookCreate, files: BookFiles) -> Book:
        """Create a Book once all three of its assets are stored."""
        missing = files.missing()
        if missing:
            raise ValidationException(
                f"All files (source, cover, sample) must be provided; missing: {', '.join(missing)}"
            )

        author = await self._require_author(data.author_name)
        category = await self._require_category(data.category)
        sale_price = derive_sale_price(data.list_price, data.discount_percent)
        book_id = str(uuid.uuid4())
        uploaded: Dict[str, str] = {}

        async def upload_assets():
            uploaded.update(await self._upload_slots(book_id, files.present()))

        async def discard_uploads():
            await self._discard_quietly(list(uploaded.values()))

        async def persist_record():
            book = Book(
                id=book_id,
                title=data.title,
                description=data.description,
                list_price=data.list_price,
                discount_percent=data.discount_percent,
                sale_price=sale_price,
                author=author,
                category=category,
                source_asset=uploaded["source"],
                cover_asset=uploaded["cover"],
                sample_asset=uploaded["sample"],
            )
            self.repo.add(book)
            await self.repo.commit()
            return book

        saga = (
            Saga("create_book")
            .step("upload_assets", upload_assets, compensate=discard_uploads)
            .step("persist_record", persist_record)
        )
        results = await saga.run()
        book = results["persist_record"]
        self.logger.info(f"Created book {book.id} ({book.title}) by {author.name}")
        return book

    async def update_book(
        self,
        book_id: str,
        data: BookUpdate,
        files: Optional[BookFiles] = None,
    ) -> Book:
        """Apply field edits and slot replacements as one combined update."""
        book = await self.repo.get_book_or_404(book_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        author = await self._require_author(changes.pop("author_name")) if "author_name" in changes else None
        category = await self._require_category(changes.pop("category")) if "category" in changes else None

        list_price = changes.get("list_price", book.list_price)
        discount_percent = changes.get("discount_percent", book.discount_percent)
        sale_price = derive_sale_price(list_price, discount_percent)

        replacements = files.present() if files else {}
        previous = {slot: getattr(book, BOOK_SLOTS[slot][1]) for slot in replacements}
        uploaded: Dict[str, str] = {}
        released: Set[str] = set()

        async def upload_assets():
            uploaded.update(await self._upload_slots(book.id, replacements))

        async def discard_uploads():
            # Released slots keep their new blob; the record points at it
            await self._discard_quietly([url for slot, url in uploaded.items() if slot not in released])

        async def repoint_released():
            # Old blobs of these slots are gone; only the new ones can be referenced
            if not released:
                return
            for slot in released:
                setattr(book, BOOK_SLOTS[slot][1], uploaded[slot])
            await self.repo.commit()
            self.logger.warning(f"Book {book_id}: repointed {sorted(released)} after a failed update")

        async def delete_replaced_assets():
            errors = await self._release_replaced(previous, released)
            if errors:
                await repoint_released()
                raise errors[0]
            return len(released)

        async def persist_record():
            for field_name, value in changes.items():
                setattr(book, field_name, value)
            if author is not None:
                book.author = author
            if category is not None:
                book.category = category
            book.sale_price = sale_price
            for slot, url in uploaded.items():
                setattr(book, BOOK_SLOTS[slot][1], url)
            await self.repo.commit()

        saga = Saga("update_book")
        if replacements:
            saga.step("upload_assets", upload_assets, compensate=discard_uploads)
            saga.step("delete_replaced_assets", delete_replaced_assets, compensate=repoint_released)
        saga.step("persist_record", persist_record)
        await saga.run()

        await self.repo.refresh(book)
        self.logger.info(
            f"Updated book {book.id}: fields={sorted(changes)} slots={sorted(replacements)}"
        )
        return book

    async def delete_book(self, book_id: str) -> None:
        """Delete a Book, its line items in carts and favorites, and its blobs."""
        book = await self.repo.get_book_or_404(book_id)

        async def detach_references():
            await self.references.detach_books([book.id])

        async def delete_assets():
            return await self.references.delete_book_assets(book)

        async def delete_record():
            await self.repo.delete(book)
            await self.repo.commit()

        await (
            Saga("delete_book")
            .step("detach_references", detach_references, compensate=self.repo.rollback)
            .step("delete_assets", delete_assets)
            .step("delete_record", delete_record)
            .run()
        )
        self.logger.info(f"Deleted book {book_id}")

    # Authors

    async def create_author(self, name: Optional[str], image: Optional[AssetUpload] = None) -> Author:
        name = (name or "").strip()
        if not name:
            raise ValidationException("Author name must be provided")
        if await self.repo.find_author_by_name(name):
            raise ValidationException(f"Author already exists: {name}")

        author_id = str(uuid.uuid4())
        uploaded: Dict[str, str] = {}

        async def upload_image():
            uploaded["image"] = await self.assets.put_upload("authors", image, owner_id=author_id)

        async def discard_image():
            await self._discard_quietly(list(uploaded.values()))

        async def persist_record():
            author = Author(id=author_id, name=name, image_asset=uploaded.get("image"))
            self.repo.add(author)
            await self.repo.commit()
            return author

        saga = Saga("create_author")
        if image is not None:
            saga.step("upload_image", upload_image, compensate=discard_image)
        saga.step("persist_record", persist_record)
        results = await saga.run()
        self.logger.info(f"Created author {author_id} ({name})")
        return results["persist_record"]

    async def update_author(
        self,
        author_id: str,
        data: AuthorUpdate,
        image: Optional[AssetUpload] = None,
    ) -> Author:
        author = await self.repo.get_author_or_404(author_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise ValidationException("Author name must not be empty")
            existing = await self.repo.find_author_by_name(changes["name"])
            if existing and existing.id != author.id:
                raise ValidationException(f"Author already exists: {changes['name']}")

        previous_image = author.image_asset
        uploaded: Dict[str, str] = {}

        async def upload_image():
            uploaded["image"] = await self.assets.put_upload("authors", image, owner_id=author.id)

        released: Set[str] = set()

        async def discard_image():
            await self._discard_quietly([url for slot, url in uploaded.items() if slot not in released])

        async def delete_previous_image():
            errors = await self._release_replaced({"image": previous_image}, released)
            if errors:
                raise errors[0]
            return len(released)

        async def persist_record():
            for field_name, value in changes.items():
                setattr(author, field_name, value)
            if "image" in uploaded:
                author.image_asset = uploaded["image"]
            await self.repo.commit()

        saga = Saga("update_author")
        if image is not None:
            saga.step("upload_image", upload_image, compensate=discard_image)
            saga.step("delete_previous_image", delete_previous_image)
        saga.step("persist_record", persist_record)
        await saga.run()

        await self.repo.refresh(author)
        self.logger.info(f"Updated author {author.id}: fields={sorted(changes)}")
        return author

    async def delete_author(self, author_id: str) -> None:
        """Delete an Author and every Book it owns, blobs included."""
        author = await self.repo.get_author_or_404(author_id)
        books = list(await self.repo.list_books_by_author(author.id))

        async def detach_references():
            await self.references.detach_books([book.id for book in books])

        async def delete_book_assets():
            deleted = 0
            for book in books:
                deleted += await self.references.delete_book_assets(book)
            return deleted

        async def delete_books():
            for book in books:
                await self.repo.delete(book)
            await self.repo.flush()

        async def delete_author_image():
            return await self.references.delete_assets([author.image_asset])

        async def delete_record():
            await self.repo.delete(author)
            await self.repo.commit()

        await (
            Saga("delete_author")
            .step("detach_references", detach_references, compensate=self.repo.rollback)
            .step("delete_book_assets", delete_book_assets)
            .step("delete_books", delete_books)
            .step("delete_author_image", delete_author_image)
            .step("delete_record", delete_record)
            .run()
        )
        self.logger.info(f"Deleted author {author_id} and {len(books)} book(s)")

    # Categories

    async def create_category(self, title: str) -> Category:
        title = title.strip()
        if not title:
            raise ValidationException("Category title must be provided")
        if await self.repo.find_category_by_title(title):
            raise ValidationException(f"Category already exists: {title}")

        category = Category(title=title)
        self.repo.add(category)
        await self.repo.commit()
        self.logger.info(f"Created category {category.id} ({title})")
        return category
