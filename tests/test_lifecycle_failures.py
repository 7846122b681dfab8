"""
Partial failure tests: storage errors part way through a lifecycle operation.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select

from bookstore.core.exceptions import PersistenceError
from bookstore.models.book import Book
from bookstore.services.catalog_repository import CatalogRepository
from tests.utils import book_files, create_author, create_book, create_category


@pytest.fixture
async def catalog(client: AsyncClient):
    await create_author(client, "Ursula Le Guin")
    await create_category(client, "Fantasy")


class TestCreateFailures:
    """Test upload failures during book creation."""

    @pytest.mark.asyncio
    async def test_failed_upload_leaves_no_record_and_no_blobs(
        self, client: AsyncClient, catalog, asset_store, session_factory
    ):
        asset_store.fail_put.add("samples")

        response = await client.post(
            "/api/books",
            data={
                "title": "Lost",
                "list_price": "10",
                "category": "Fantasy",
                "author_name": "Ursula Le Guin",
            },
            files=book_files("lost"),
        )

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert body["error"]["details"]["saga"] == "create_book"
        assert body["error"]["details"]["failed_step"] == "upload_assets"
        assert body["error"]["details"]["error_id"].startswith("ERR-")

        assert asset_store.stored_files() == []
        async with session_factory() as session:
            assert (await session.execute(select(Book))).scalars().all() == []


class TestUpdateFailures:
    """Test upload failures during book updates."""

    @pytest.mark.asyncio
    async def test_failed_upload_keeps_existing_assets(self, client: AsyncClient, catalog, asset_store):
        book = await create_book(client)
        asset_store.fail_put.add("samples")

        response = await client.patch(
            f"/api/books/{book['id']}",
            data={"title": "Renamed"},
            files={
                "cover": ("new cover.png", b"png", "image/png"),
                "sample": ("new sample.pdf", b"pdf", "application/pdf"),
            },
        )

        assert response.status_code == 500
        current = (await client.get(f"/api/books/{book['id']}")).json()["data"]
        assert current["title"] == book["title"]
        assert current["cover_asset"] == book["cover_asset"]
        assert await asset_store.exists(book["cover_asset"])
        # Only the original three blobs remain
        assert len(asset_store.stored_files()) == 3

    @pytest.mark.asyncio
    async def test_partial_replacement_never_points_at_deleted_blob(
        self, client: AsyncClient, catalog, asset_store
    ):
        book = await create_book(client)
        asset_store.fail_delete.add("samples")

        response = await client.patch(
            f"/api/books/{book['id']}",
            data={"title": "Renamed"},
            files={
                "cover": ("new cover.png", b"png", "image/png"),
                "sample": ("new sample.pdf", b"pdf", "application/pdf"),
            },
        )

        assert response.status_code == 500
        assert response.json()["error"]["details"]["failed_step"] == "delete_replaced_assets"

        current = (await client.get(f"/api/books/{book['id']}")).json()["data"]
        # Old cover is gone, so the record moved to the new one
        assert not await asset_store.exists(book["cover_asset"])
        assert current["cover_asset"] != book["cover_asset"]
        assert await asset_store.exists(current["cover_asset"])
        # Old sample could not be deleted, so it stays in place
        assert current["sample_asset"] == book["sample_asset"]
        assert await asset_store.exists(current["sample_asset"])
        # Field edits are not applied by a failed update
        assert current["title"] == book["title"]
        assert await asset_store.exists(book["source_asset"])

        asset_store.fail_delete.clear()
        response = await client.patch(
            f"/api/books/{book['id']}",
            data={"title": "Renamed"},
            files={"sample": ("new sample.pdf", b"pdf", "application/pdf")},
        )

        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["title"] == "Renamed"
        assert updated["cover_asset"] == current["cover_asset"]
        assert not await asset_store.exists(book["sample_asset"])
        assert await asset_store.exists(updated["sample_asset"])

    @pytest.mark.asyncio
    async def test_failed_save_after_replacement_keeps_record_on_new_blob(
        self, client: AsyncClient, catalog, asset_store, monkeypatch
    ):
        book = await create_book(client)
        real_commit = CatalogRepository.commit
        commits = []

        async def commit_failing_once(repo):
            commits.append(repo)
            if len(commits) == 1:
                await repo.rollback()
                raise PersistenceError("simulated commit failure")
            await real_commit(repo)

        monkeypatch.setattr(CatalogRepository, "commit", commit_failing_once)
        response = await client.patch(
            f"/api/books/{book['id']}",
            data={"title": "Renamed"},
            files={"cover": ("new cover.png", b"png", "image/png")},
        )
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json()["error"]["details"]["failed_step"] == "persist_record"

        current = (await client.get(f"/api/books/{book['id']}")).json()["data"]
        assert not await asset_store.exists(book["cover_asset"])
        assert current["cover_asset"] != book["cover_asset"]
        assert await asset_store.exists(current["cover_asset"])
        assert current["title"] == book["title"]


class TestDeleteFailures:
    """Test blob deletion failures during cascades."""

    @pytest.mark.asyncio
    async def test_failed_blob_delete_aborts_and_retry_succeeds(
        self, client: AsyncClient, catalog, asset_store
    ):
        book = await create_book(client)
        asset_store.fail_delete.add("covers")

        response = await client.delete(f"/api/books/{book['id']}")

        assert response.status_code == 500
        details = response.json()["error"]["details"]
        assert details["saga"] == "delete_book"
        assert details["failed_step"] == "delete_assets"
        assert details["completed_steps"] == ["detach_references"]
        # Record is still there
        assert (await client.get(f"/api/books/{book['id']}")).status_code == 200

        asset_store.fail_delete.clear()
        response = await client.delete(f"/api/books/{book['id']}")

        assert response.status_code == 200
        assert (await client.get(f"/api/books/{book['id']}")).status_code == 404
        assert asset_store.stored_files() == []

    @pytest.mark.asyncio
    async def test_failed_author_cascade_is_retryable(self, client: AsyncClient, catalog, asset_store):
        await create_book(client, title="A Wizard of Earthsea")
        await create_book(client, title="Tehanu")
        author_id = (await client.get("/api/authors")).json()["data"][0]["id"]
        asset_store.fail_delete.add("samples")

        response = await client.delete(f"/api/authors/{author_id}")

        assert response.status_code == 500
        assert response.json()["error"]["details"]["failed_step"] == "delete_book_assets"
        assert (await client.get(f"/api/authors/{author_id}")).status_code == 200
        assert (await client.get("/api/books")).json()["data"]["total"] == 2

        asset_store.fail_delete.clear()
        response = await client.delete(f"/api/authors/{author_id}")

        assert response.status_code == 200
        assert (await client.get("/api/authors")).json()["data"] == []
        assert (await client.get("/api/books")).json()["data"]["total"] == 0
        assert asset_store.stored_files() == []
