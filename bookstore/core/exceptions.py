"""Custom exceptions for the application."""
from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base exception for application errors."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str | None = None,
        headers: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code
        self.headers = headers


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND",
        )


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="BAD_REQUEST",
        )


class UnauthorizedException(AppException):
    """Unauthorized exception."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"},
        )


class ValidationException(AppException):
    """Validation exception."""

    def __init__(self, detail: str = "Validation error") -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code="VALIDATION_ERROR",
        )


class CatalogError(Exception):
    """Base class for infrastructure failures surfaced as internal errors."""

    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StorageWriteError(CatalogError):
    """Blob upload failed."""

    error_code = "STORAGE_WRITE_ERROR"


class StorageDeleteError(CatalogError):
    """Blob deletion failed."""

    error_code = "STORAGE_DELETE_ERROR"


class AssetNotFoundError(StorageDeleteError):
    """Blob to delete is already absent."""

    error_code = "ASSET_NOT_FOUND"


class PersistenceError(CatalogError):
    """Document store failure."""

    error_code = "PERSISTENCE_ERROR"


class CascadeError(CatalogError):
    """A multi-step lifecycle operation failed part way through."""

    error_code = "CASCADE_FAILED"

    def __init__(
        self,
        saga: str,
        step: str,
        cause: BaseException,
        completed: list[str] | None = None,
    ) -> None:
        self.saga = saga
        self.step = step
        self.cause = cause
        self.completed = list(completed or [])
        super().__init__(f"{saga} failed at step '{step}': {cause}")
