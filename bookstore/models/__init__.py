"""Database models."""
from bookstore.models.author import Author
from bookstore.models.book import Book
from bookstore.models.cart import Cart, CartItem
from bookstore.models.category import Category
from bookstore.models.favorites import FavoriteItem, Favorites
from bookstore.models.order import Order, OrderItem

__all__ = [
    "Author",
    "Book",
    "Category",
    "Cart",
    "CartItem",
    "Favorites",
    "FavoriteItem",
    "Order",
    "OrderItem",
]
