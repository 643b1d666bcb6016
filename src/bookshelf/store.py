"""
Read-only in-memory data store shared by the books and authors services
"""

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict


class BookRecord(BaseModel):
    """A stored book. ``author`` is never stored; it is resolved at query time."""

    model_config = ConfigDict(frozen=True)

    title: str
    author_id: int


class AuthorRecord(BaseModel):
    """A stored author, keyed in the store by the id books refer to."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class DataStore:
    """Immutable view over the ``books`` and ``authors`` fixtures."""

    def __init__(
        self,
        books: Mapping[int, BookRecord],
        authors: Mapping[int, AuthorRecord],
    ):
        self._books = MappingProxyType(dict(books))
        self._authors = MappingProxyType(dict(authors))

    @property
    def books(self) -> Mapping[int, BookRecord]:
        return self._books

    @property
    def authors(self) -> Mapping[int, AuthorRecord]:
        return self._authors

    def list_books(self) -> list[BookRecord]:
        """All books in store iteration order."""
        return list(self._books.values())

    def list_authors(self) -> list[AuthorRecord]:
        return list(self._authors.values())

    def get_author(self, author_id: int | None) -> AuthorRecord | None:
        if author_id is None:
            return None
        return self._authors.get(author_id)


BOOKS: Mapping[int, BookRecord] = {
    1: BookRecord(title="Harry Potter and the Chamber of Secrets", author_id=1),
    2: BookRecord(title="Jurassic Park", author_id=2),
    3: BookRecord(title="Harry Potter and the Prisoner of Azkaban", author_id=1),
}

AUTHORS: Mapping[int, AuthorRecord] = {
    1: AuthorRecord(id=1, name="J.K. Rowling"),
    2: AuthorRecord(id=2, name="Michael Crichton"),
}

# Loaded once at import; never mutated
default_store = DataStore(BOOKS, AUTHORS)
