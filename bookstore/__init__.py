"""Bookstore catalog service."""
