"""
Tests for the read-only data store
"""

import pytest
from pydantic import ValidationError

from bookshelf.store import AUTHORS, BOOKS, AuthorRecord, BookRecord, DataStore, default_store


class TestDataStore:
    def test_list_books_preserves_insertion_order(self):
        books = {
            7: BookRecord(title="Second", author_id=1),
            3: BookRecord(title="First", author_id=2),
        }
        store = DataStore(books, AUTHORS)

        assert [book.title for book in store.list_books()] == ["Second", "First"]

    def test_get_author(self):
        assert default_store.get_author(1) == AuthorRecord(id=1, name="J.K. Rowling")
        assert default_store.get_author(404) is None
        assert default_store.get_author(None) is None

    def test_mappings_are_read_only(self):
        with pytest.raises(TypeError):
            default_store.books[99] = BookRecord(title="Nope", author_id=1)  # type: ignore[index]

        with pytest.raises(TypeError):
            default_store.authors[99] = AuthorRecord(id=99, name="Nope")  # type: ignore[index]

    def test_records_are_frozen(self):
        book = default_store.list_books()[0]

        with pytest.raises(ValidationError):
            book.title = "Changed"  # type: ignore[misc]

    def test_store_copies_source_mappings(self):
        books = dict(BOOKS)
        store = DataStore(books, AUTHORS)
        books.clear()

        assert len(store.list_books()) == len(BOOKS)
