"""
Internal error handling.

Turns storage and persistence failures into a 500 response that carries an
error id and the failed saga step, so a partially applied operation can be
reconciled by hand.
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from bookstore.core.exceptions import CascadeError, CatalogError

logger = logging.getLogger(__name__)


def generate_error_id() -> str:
    """Generate unique error ID for tracking."""
    return f"ERR-{datetime.now().strftime('%Y%m%d')}-{uuid.uuid4().hex[:8].upper()}"


def build_error_details(error: CatalogError) -> Dict[str, Any]:
    """Collect reconciliation details for an internal error."""
    details: Dict[str, Any] = {"type": type(error).__name__}
    if isinstance(error, CascadeError):
        details.update(
            {
                "saga": error.saga,
                "failed_step": error.step,
                "completed_steps": error.completed,
                "cause": str(error.cause),
                "cause_type": type(error.cause).__name__,
            }
        )
    return details


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Render an internal failure in the standard response envelope."""
    error_id = generate_error_id()
    details = build_error_details(exc)
    logger.error(
        f"Error [{error_id}] {request.method} {request.url.path}: {exc.message}",
        extra={"context": details},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "data": None,
            "error": {
                "code": "INTERNAL_ERROR",
                "message": exc.message,
                "details": {"error_id": error_id, "reason": exc.error_code, **details},
            },
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the internal error handler on the application."""
    app.add_exception_handler(CatalogError, catalog_error_handler)
