"""
GraphQL schema of the authors service, the remote side of the gateway
"""

from typing import Any

import strawberry
from fastapi import Request
from strawberry.fastapi import GraphQLRouter

from ..logging import get_logger
from ..store import DataStore, default_store
from .types import Author

logger = get_logger(__name__)


@strawberry.type
class Query:
    """Root query type of the authors service."""

    @strawberry.field
    async def author(self, info: strawberry.Info, id: int | None = None) -> Author | None:
        """Get an author by ID."""
        from .resolvers import resolve_author_by_id

        return await resolve_author_by_id(info, id)

    @strawberry.field
    async def authors(self, info: strawberry.Info) -> list[Author]:
        """List every author."""
        from .resolvers import resolve_authors

        return await resolve_authors(info)


schema = strawberry.Schema(query=Query)


def create_graphql_router(store: DataStore | None = None) -> GraphQLRouter[dict[str, Any], None]:
    """Create the authors GraphQL router for FastAPI."""
    store = store or default_store

    async def get_context(request: Request) -> dict[str, Any]:
        """Get the context for GraphQL resolvers."""
        return {
            "request": request,
            "store": store,
        }

    return GraphQLRouter(
        schema,
        path="/graphql",
        graphql_ide="graphiql",
        context_getter=get_context,
    )
