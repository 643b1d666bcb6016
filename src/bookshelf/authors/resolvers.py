"""
Resolvers for the authors service
"""

import strawberry

from ..logging import get_logger
from ..store import DataStore, default_store
from .types import Author

logger = get_logger(__name__)


class AuthorNotFoundError(Exception):
    """Raised when an author id has no record."""

    def __init__(self, author_id: int):
        super().__init__(f"Author {author_id} not found")
        self.author_id = author_id


def get_store(info: strawberry.Info) -> DataStore:
    return info.context.get("store") or default_store


async def resolve_author_by_id(info: strawberry.Info, author_id: int | None) -> Author | None:
    if author_id is None:
        return None

    record = get_store(info).get_author(author_id)
    if record is None:
        logger.warning("Author lookup failed", author_id=author_id)
        raise AuthorNotFoundError(author_id)

    return Author.from_record(record)


async def resolve_authors(info: strawberry.Info) -> list[Author]:
    return [Author.from_record(record) for record in get_store(info).list_authors()]
