"""API routes."""
from fastapi import APIRouter

from bookstore.api import authors, books, categories

api_router = APIRouter(prefix="/api")

api_router.include_router(books.router, prefix="/books", tags=["Books"])
api_router.include_router(authors.router, prefix="/authors", tags=["Authors"])
api_router.include_router(categories.router, prefix="/categories", tags=["Categories"])
