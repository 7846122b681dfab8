"""Helpers shared by the catalog tests."""
from decimal import Decimal
from pathlib import Path

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.core.exceptions import StorageDeleteError, StorageWriteError
from bookstore.models.author import Author
from bookstore.models.book import Book
from bookstore.models.category import Category
from bookstore.services.asset_store import LocalAssetStore
from bookstore.services.pricing import derive_sale_price

ASSET_BASE_URL = "http://test/static/assets"


class FlakyAssetStore(LocalAssetStore):
    """Local store that fails on demand for chosen namespaces."""

    def __init__(self, root: Path, base_url: str = ASSET_BASE_URL):
        super().__init__(root, base_url)
        self.fail_put: set[str] = set()
        self.fail_delete: set[str] = set()

    async def put(self, namespace, filename, data, content_type, owner_id=None):
        if namespace in self.fail_put:
            raise StorageWriteError(f"simulated write failure in {namespace}")
        return await super().put(namespace, filename, data, content_type, owner_id)

    async def delete(self, url):
        if any(f"/{namespace}/" in url for namespace in self.fail_delete):
            raise StorageDeleteError(f"simulated delete failure for {url}")
        await super().delete(url)

    def stored_files(self) -> list[Path]:
        return [p for p in self.root.rglob("*") if p.is_file()]


def book_files(prefix: str = "book") -> dict:
    """Multipart payload for the three book slots."""
    return {
        "source": (f"{prefix} full.pdf", b"%PDF full text", "application/pdf"),
        "cover": (f"{prefix} cover.png", b"\x89PNG cover", "image/png"),
        "sample": (f"{prefix} sample.pdf", b"%PDF sample", "application/pdf"),
    }


async def create_author(client: AsyncClient, name: str = "Ursula Le Guin") -> dict:
    response = await client.post("/api/authors", data={"name": name})
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_category(client: AsyncClient, title: str = "Fantasy") -> dict:
    response = await client.post("/api/categories", json={"title": title})
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_book(
    client: AsyncClient,
    title: str = "A Wizard of Earthsea",
    author_name: str = "Ursula Le Guin",
    category: str = "Fantasy",
    list_price: str = "20",
    discount_percent: str = "0",
) -> dict:
    response = await client.post(
        "/api/books",
        data={
            "title": title,
            "description": "A young mage learns the true names of things.",
            "list_price": list_price,
            "discount_percent": discount_percent,
            "category": category,
            "author_name": author_name,
        },
        files=book_files(title),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def seed_book(
    session: AsyncSession,
    author: Author,
    category: Category,
    title: str,
    list_price: str,
    discount_percent: str = "0",
) -> Book:
    """Insert a book row directly, with placeholder asset URLs."""
    book = Book(
        title=title,
        list_price=Decimal(list_price),
        discount_percent=Decimal(discount_percent),
        sale_price=derive_sale_price(list_price, discount_percent),
        author=author,
        category=category,
        source_asset=f"{ASSET_BASE_URL}/books/{title}.pdf",
        cover_asset=f"{ASSET_BASE_URL}/covers/{title}.png",
        sample_asset=f"{ASSET_BASE_URL}/samples/{title}.pdf",
    )
    session.add(book)
    await session.flush()
    return book
