"""
Asset Store
Stores book files, covers, samples and author images as opaque blobs
addressed by a long-lived retrieval URL.
"""

import asyncio
import logging
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

from bookstore.config import settings
from bookstore.core.exceptions import (
    AssetNotFoundError,
    StorageDeleteError,
    StorageWriteError,
)

logger = logging.getLogger(__name__)

NAMESPACES = ("books", "covers", "samples", "authors")

_WHITESPACE = re.compile(r"\s+")


def sanitize_filename(filename: str) -> str:
    """Collapse runs of whitespace into a single underscore.

    Path separators are dropped too, so a client-supplied name can never
    escape its namespace.
    """
    name = Path(filename.replace("\\", "/")).name.strip()
    return _WHITESPACE.sub("_", name) or "file"


@dataclass
class AssetUpload:
    """A named byte blob waiting to be stored."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class AssetStore(ABC):
    """Key to URL blob store contract."""

    @abstractmethod
    async def put(
        self,
        namespace: str,
        filename: str,
        data: bytes,
        content_type: str,
        owner_id: Optional[str] = None,
    ) -> str:
        """Store a blob and return its retrieval URL.

        Raises:
            StorageWriteError: If the blob cannot be written
        """

    @abstractmethod
    async def delete(self, url: str) -> None:
        """Delete the blob behind a previously issued URL.

        Raises:
            AssetNotFoundError: If the blob is already absent
            StorageDeleteError: On any other failure
        """

    @abstractmethod
    async def exists(self, url: str) -> bool:
        """Check whether the blob behind ``url`` is retrievable."""

    async def put_upload(self, namespace: str, upload: AssetUpload, owner_id: Optional[str] = None) -> str:
        return await self.put(namespace, upload.filename, upload.content, upload.content_type, owner_id)

    async def discard(self, url: Optional[str]) -> bool:
        """Delete a blob, treating an already-absent blob as success.

        Returns:
            True if a blob was removed, False if there was nothing to remove
        """
        if not url:
            return False
        try:
            await self.delete(url)
            return True
        except AssetNotFoundError:
            logger.warning(f"Asset already absent, nothing to delete: {url}")
            return False

    @staticmethod
    def build_key(namespace: str, filename: str, owner_id: Optional[str] = None) -> str:
        """Build a storage key unique to this upload.

        Layout: ``{namespace}/{owner_id}/{token}_{sanitized}``. The random
        token keeps two uploads of the same file name apart.
        """
        if namespace not in NAMESPACES:
            raise ValueError(f"Unknown asset namespace: {namespace}")
        name = f"{uuid.uuid4().hex[:12]}_{sanitize_filename(filename)}"
        if owner_id:
            return f"{namespace}/{owner_id}/{name}"
        return f"{namespace}/{name}"


class LocalAssetStore(AssetStore):
    """Asset store backed by a local directory served as static files."""

    def __init__(self, root: Path, base_url: str):
        """
        Initialize local asset store.

        Args:
            root: Directory holding the namespaces
            base_url: URL prefix the directory is served under
        """
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    def key_for(self, url: str) -> str:
        """Recover the storage key from an issued URL."""
        path = unquote(urlsplit(url).path)
        prefix = urlsplit(self.base_url).path.rstrip("/") + "/"
        if not path.startswith(prefix):
            raise StorageDeleteError(f"URL is not managed by this store: {url}")
        key = path[len(prefix):]
        if not key or ".." in Path(key).parts:
            raise StorageDeleteError(f"Invalid asset URL: {url}")
        return key

    async def put(
        self,
        namespace: str,
        filename: str,
        data: bytes,
        content_type: str,
        owner_id: Optional[str] = None,
    ) -> str:
        key = self.build_key(namespace, filename, owner_id)
        path = self.root / key

        def _write():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, _write)
        except OSError as e:
            logger.error(f"Failed to write asset {key}: {e}")
            raise StorageWriteError(f"Failed to store {namespace}/{filename}: {e}") from e

        logger.info(f"Stored asset {key} ({len(data)} bytes, {content_type})")
        return self.url_for(key)

    async def delete(self, url: str) -> None:
        key = self.key_for(url)
        path = self.root / key

        def _remove():
            path.unlink()

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, _remove)
        except FileNotFoundError as e:
            raise AssetNotFoundError(f"Asset not found: {key}") from e
        except OSError as e:
            logger.error(f"Failed to delete asset {key}: {e}")
            raise StorageDeleteError(f"Failed to delete {key}: {e}") from e

        logger.info(f"Deleted asset {key}")

    async def exists(self, url: str) -> bool:
        try:
            key = self.key_for(url)
        except StorageDeleteError:
            return False
        return (self.root / key).is_file()


# Global instance
_asset_store: Optional[AssetStore] = None


def get_asset_store() -> AssetStore:
    """Get global asset store instance."""
    global _asset_store
    if _asset_store is None:
        _asset_store = LocalAssetStore(settings.asset_dir, settings.asset_base_url)
    return _asset_store
