"""Local books schema and its resolvers."""

from .schema import build_books_schema

__all__ = ["build_books_schema"]
