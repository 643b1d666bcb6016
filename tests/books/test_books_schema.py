"""
Tests for the local books schema
"""

import pytest
from graphql import graphql

from bookshelf.books import build_books_schema
from bookshelf.store import AUTHORS, BookRecord, DataStore, default_store


@pytest.mark.unit
class TestBooksSchema:
    @pytest.mark.asyncio
    async def test_books_returns_store_contents_in_order(self):
        schema = build_books_schema(default_store)

        result = await graphql(schema, "{ books { title authorId } }")

        assert result.errors is None
        assert result.data == {
            "books": [
                {"title": book.title, "authorId": book.author_id}
                for book in default_store.list_books()
            ]
        }

    @pytest.mark.asyncio
    async def test_books_reads_the_given_store(self):
        store = DataStore({5: BookRecord(title="Only Book", author_id=2)}, AUTHORS)
        schema = build_books_schema(store)

        result = await graphql(schema, "{ books { title } }")

        assert result.data == {"books": [{"title": "Only Book"}]}

    @pytest.mark.asyncio
    async def test_author_is_not_part_of_the_gateway_local_schema(self):
        schema = build_books_schema(default_store)

        result = await graphql(schema, "{ books { author { name } } }")

        assert result.data is None
        assert "Cannot query field 'author' on type 'Book'" in result.errors[0].message

    @pytest.mark.asyncio
    async def test_standalone_variant_resolves_author_locally(self):
        schema = build_books_schema(default_store, include_authors=True)

        result = await graphql(schema, "{ books { title author { id name } } }")

        assert result.errors is None
        assert result.data["books"][0] == {
            "title": "Harry Potter and the Chamber of Secrets",
            "author": {"id": 1, "name": "J.K. Rowling"},
        }
        assert result.data["books"][1]["author"]["name"] == "Michael Crichton"

    @pytest.mark.asyncio
    async def test_standalone_variant_unknown_author_is_null(self):
        store = DataStore({1: BookRecord(title="Orphan", author_id=42)}, AUTHORS)
        schema = build_books_schema(store, include_authors=True)

        result = await graphql(schema, "{ books { title author { name } } }")

        assert result.errors is None
        assert result.data == {"books": [{"title": "Orphan", "author": None}]}
