"""
Local books schema.

The type system is declared in SDL and resolvers are attached with ariadne
bindables, so every ``(type, field)`` binding is checked against the SDL when
the schema is built rather than when a query first touches it.
"""

from typing import Any

from ariadne import ObjectType, QueryType, gql, make_executable_schema
from graphql import GraphQLResolveInfo, GraphQLSchema

from ..logging import get_logger
from ..store import AuthorRecord, BookRecord, DataStore, default_store

logger = get_logger(__name__)

BOOK_TYPE_DEFS = gql(
    """
    type Query {
        books: [Book]
    }

    type Book {
        title: String!
        authorId: Int
    }
    """
)

# Standalone variant only: authors live in the same process
AUTHOR_TYPE_DEFS = gql(
    """
    type Author {
        id: Int!
        name: String!
    }

    extend type Book {
        author: Author
    }
    """
)


def create_query_type(store: DataStore) -> QueryType:
    query = QueryType()

    @query.field("books")
    def resolve_books(_obj: Any, _info: GraphQLResolveInfo) -> list[BookRecord]:
        books = store.list_books()
        logger.info("Fetching books", count=len(books))
        return books

    return query


def create_book_type(store: DataStore) -> ObjectType:
    book = ObjectType("Book")

    @book.field("author")
    def resolve_book_author(obj: BookRecord, _info: GraphQLResolveInfo) -> AuthorRecord | None:
        return store.get_author(obj.author_id)

    return book


def build_books_schema(
    store: DataStore | None = None, include_authors: bool = False
) -> GraphQLSchema:
    """Build the executable books schema.

    Args:
        store: Data store to read from (defaults to the bundled fixtures)
        include_authors: Also declare ``Author`` and resolve ``Book.author``
            by direct lookup. The gateway leaves this off and delegates the
            field to the authors service instead.

    Returns:
        An executable graphql-core schema
    """
    store = store or default_store

    type_defs = [BOOK_TYPE_DEFS]
    bindables = [create_query_type(store)]
    if include_authors:
        type_defs.append(AUTHOR_TYPE_DEFS)
        bindables.append(create_book_type(store))

    return make_executable_schema(type_defs, *bindables, convert_names_case=True)
