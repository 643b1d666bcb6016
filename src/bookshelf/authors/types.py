"""
Author GraphQL type definitions
"""

import strawberry

from ..store import AuthorRecord


@strawberry.type
class Author:
    """Author type for the authors service."""

    id: int
    name: str

    @classmethod
    def from_record(cls, record: AuthorRecord) -> "Author":
        return cls(id=record.id, name=record.name)
