"""Dependency injection utilities."""
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, UploadFile
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.config import settings
from bookstore.core.exceptions import BadRequestException, UnauthorizedException
from bookstore.core.security import decode_access_token
from bookstore.database import get_db
from bookstore.services.asset_store import AssetStore, AssetUpload, get_asset_store
from bookstore.services.lifecycle import CatalogLifecycle

# auto_error=False: anonymous readers are allowed
security = HTTPBearer(auto_error=False)


@dataclass
class Requester:
    """Identity resolved from the bearer token."""

    id: str


async def get_optional_requester(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Requester | None:
    """Resolve the requester, if a token was sent.

    Returns:
        Requester | None: None for anonymous requests

    Raises:
        UnauthorizedException: If a token was sent but is invalid
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise UnauthorizedException("Invalid or expired token")

    return Requester(id=str(payload["sub"]))


async def get_catalog_lifecycle(
    db: Annotated[AsyncSession, Depends(get_db)],
    assets: Annotated[AssetStore, Depends(get_asset_store)],
) -> CatalogLifecycle:
    return CatalogLifecycle(db, assets)


async def read_upload(file: UploadFile | None) -> AssetUpload | None:
    """Read a multipart file into memory, enforcing the upload size limit."""
    if file is None or not file.filename:
        return None
    content = await file.read()
    if len(content) > settings.max_upload_size:
        raise BadRequestException(
            f"File too large: {file.filename} (max {settings.max_upload_size} bytes)"
        )
    return AssetUpload(
        filename=file.filename,
        content=content,
        content_type=file.content_type or "application/octet-stream",
    )


# Type aliases for dependency injection
DbDep = Annotated[AsyncSession, Depends(get_db)]
AssetStoreDep = Annotated[AssetStore, Depends(get_asset_store)]
RequesterDep = Annotated[Requester | None, Depends(get_optional_requester)]
LifecycleDep = Annotated[CatalogLifecycle, Depends(get_catalog_lifecycle)]
