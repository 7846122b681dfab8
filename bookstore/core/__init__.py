"""Core module."""
from bookstore.core.exceptions import (
    AppException,
    AssetNotFoundError,
    BadRequestException,
    CascadeError,
    CatalogError,
    NotFoundException,
    PersistenceError,
    StorageDeleteError,
    StorageWriteError,
    UnauthorizedException,
    ValidationException,
)
from bookstore.core.security import create_access_token, decode_access_token

__all__ = [
    "AppException",
    "NotFoundException",
    "BadRequestException",
    "UnauthorizedException",
    "ValidationException",
    "CatalogError",
    "StorageWriteError",
    "StorageDeleteError",
    "AssetNotFoundError",
    "PersistenceError",
    "CascadeError",
    "create_access_token",
    "decode_access_token",
]
