"""
HTTP front door for graphql-core schemas served through ariadne
"""

from typing import Any

from ariadne.asgi import GraphQL
from ariadne.explorer import ExplorerGraphiQL
from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse
from graphql import GraphQLSchema

from ..logging import get_logger

logger = get_logger(__name__)

GRAPHQL_PATH = "/graphql"
CONSOLE_PATH = "/graphiql"


def get_context(request: Request, _data: Any) -> dict[str, Any]:
    """Get the context for GraphQL resolvers."""
    return {
        "request": request,
    }


def create_graphql_router(schema: GraphQLSchema, debug: bool = False) -> APIRouter:
    """Expose ``schema`` on /graphql with a GraphiQL console.

    POST executes operations; GET serves the console. /graphiql points at
    the same console.
    """
    graphql_app = GraphQL(
        schema,
        context_value=get_context,
        debug=debug,
        explorer=ExplorerGraphiQL(title="Bookshelf GraphiQL"),
    )
    router = APIRouter()

    @router.get(GRAPHQL_PATH, include_in_schema=False)
    async def handle_graphql_explorer(request: Request):  # pyright: ignore [reportUnusedFunction]
        return await graphql_app.handle_request(request)

    @router.post(GRAPHQL_PATH, include_in_schema=False)
    async def handle_graphql_query(request: Request):  # pyright: ignore [reportUnusedFunction]
        return await graphql_app.handle_request(request)

    @router.get(CONSOLE_PATH, include_in_schema=False)
    async def graphiql_console():  # pyright: ignore [reportUnusedFunction]
        return RedirectResponse(GRAPHQL_PATH)

    return router
