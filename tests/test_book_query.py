"""
Catalog listing tests: filters, sort orders and pagination.
"""
import pytest
from httpx import AsyncClient

from bookstore.models.author import Author
from bookstore.models.category import Category
from tests.utils import seed_book


@pytest.fixture
async def two_books(session_factory):
    """A (10, no discount, first) and B (20 at 50% off, second)."""
    async with session_factory() as session:
        author = Author(name="Ann Leckie")
        category = Category(title="Science Fiction")
        session.add_all([author, category])
        a = await seed_book(session, author, category, "Ancillary Justice", "10")
        b = await seed_book(session, author, category, "Ancillary Sword", "20", "50")
        await session.commit()
        return {"A": a.id, "B": b.id}


@pytest.fixture
async def shelf(session_factory):
    """A mixed shelf across two authors and two categories."""
    async with session_factory() as session:
        leckie = Author(name="Ann Leckie")
        wells = Author(name="Martha Wells")
        scifi = Category(title="Science Fiction")
        fantasy = Category(title="Fantasy")
        session.add_all([leckie, wells, scifi, fantasy])
        await seed_book(session, leckie, scifi, "Ancillary Justice", "15")
        await seed_book(session, leckie, fantasy, "The Raven Tower", "25", "20")
        await seed_book(session, wells, scifi, "All Systems Red", "8")
        await seed_book(session, wells, fantasy, "The Wizard Hunters", "30", "10")
        await session.commit()


async def list_books(client: AsyncClient, **params) -> dict:
    response = await client.get("/api/books", params=params)
    assert response.status_code == 200, response.text
    return response.json()["data"]


class TestSorting:
    """Test sort orders."""

    @pytest.mark.asyncio
    async def test_on_sale_returns_only_discounted(self, client: AsyncClient, two_books):
        page = await list_books(client, sort_by="on-sale")

        assert [b["id"] for b in page["items"]] == [two_books["B"]]
        assert page["items"][0]["sale_price"] == 10.0

    @pytest.mark.asyncio
    async def test_price_low_to_high_tie_keeps_stored_order(self, client: AsyncClient, two_books):
        page = await list_books(client, sort_by="price-low-to-high")

        assert [b["id"] for b in page["items"]] == [two_books["A"], two_books["B"]]
        assert [b["sale_price"] for b in page["items"]] == [10.0, 10.0]

    @pytest.mark.asyncio
    async def test_oldest_and_newest(self, client: AsyncClient, two_books):
        oldest = await list_books(client, sort_by="oldest")
        newest = await list_books(client, sort_by="newest")

        assert [b["id"] for b in oldest["items"]] == [two_books["A"], two_books["B"]]
        assert [b["id"] for b in newest["items"]] == [two_books["B"], two_books["A"]]

    @pytest.mark.asyncio
    async def test_price_high_to_low(self, client: AsyncClient, shelf):
        page = await list_books(client, sort_by="price-high-to-low")

        assert [b["sale_price"] for b in page["items"]] == [27.0, 20.0, 15.0, 8.0]

    @pytest.mark.asyncio
    async def test_unknown_sort_rejected(self, client: AsyncClient):
        response = await client.get("/api/books", params={"sort_by": "popularity"})
        assert response.status_code == 422


class TestFilters:
    """Test listing filters."""

    @pytest.mark.asyncio
    async def test_author_filter(self, client: AsyncClient, shelf):
        page = await list_books(client, author="Martha Wells")
        assert sorted(b["title"] for b in page["items"]) == ["All Systems Red", "The Wizard Hunters"]

    @pytest.mark.asyncio
    async def test_category_filter(self, client: AsyncClient, shelf):
        page = await list_books(client, category="Fantasy")
        assert sorted(b["title"] for b in page["items"]) == ["The Raven Tower", "The Wizard Hunters"]

    @pytest.mark.asyncio
    async def test_price_range_is_inclusive_on_sale_price(self, client: AsyncClient, shelf):
        page = await list_books(client, min_price="15", max_price="20", sort_by="price-low-to-high")
        assert [b["title"] for b in page["items"]] == ["Ancillary Justice", "The Raven Tower"]

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_substring(self, client: AsyncClient, shelf):
        page = await list_books(client, search="WIZARD")
        assert [b["title"] for b in page["items"]] == ["The Wizard Hunters"]

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, client: AsyncClient, shelf):
        page = await list_books(client, search="%")
        assert page["items"] == []

    @pytest.mark.asyncio
    async def test_combined_filters(self, client: AsyncClient, shelf):
        page = await list_books(client, author="Ann Leckie", category="Science Fiction")
        assert [b["title"] for b in page["items"]] == ["Ancillary Justice"]

    @pytest.mark.asyncio
    async def test_listing_never_includes_source(self, client: AsyncClient, shelf):
        page = await list_books(client)
        assert page["total"] == 4
        assert all("source_asset" not in b for b in page["items"])


class TestPagination:
    """Test page arithmetic."""

    @pytest.fixture
    async def many_books(self, session_factory):
        async with session_factory() as session:
            author = Author(name="Terry Pratchett")
            category = Category(title="Discworld")
            session.add_all([author, category])
            for i in range(25):
                await seed_book(session, author, category, f"Discworld {i + 1:02d}", "9.99")
            await session.commit()

    @pytest.mark.asyncio
    async def test_default_page_size_is_twelve(self, client: AsyncClient, many_books):
        page = await list_books(client)

        assert len(page["items"]) == 12
        assert page["limit"] == 12
        assert page["total"] == 25
        assert page["total_pages"] == 3
        assert page["current_page"] == 1

    @pytest.mark.asyncio
    async def test_last_page_holds_remainder(self, client: AsyncClient, many_books):
        page = await list_books(client, page=3, limit=12, sort_by="oldest")

        assert page["total_pages"] == 3
        assert page["current_page"] == 3
        assert [b["title"] for b in page["items"]] == ["Discworld 25"]

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, client: AsyncClient, many_books):
        page = await list_books(client, page=5)

        assert page["items"] == []
        assert page["total_pages"] == 3

    @pytest.mark.asyncio
    async def test_empty_catalog(self, client: AsyncClient):
        page = await list_books(client)

        assert page["items"] == []
        assert page["total"] == 0
        assert page["total_pages"] == 0

    @pytest.mark.asyncio
    async def test_page_must_be_positive(self, client: AsyncClient):
        response = await client.get("/api/books", params={"page": 0})
        assert response.status_code == 422
