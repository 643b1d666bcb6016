"""
FastAPI applications for the three Bookshelf services
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from graphql import GraphQLSchema

from .. import __version__
from ..config import Settings, settings as default_settings
from ..gateway import GatewaySchema
from ..logging import get_logger
from ..middleware import LoggingContextMiddleware
from ..store import DataStore
from ..validation import validate_schema
from .graphql import GRAPHQL_PATH, create_graphql_router

logger = get_logger(__name__)


def _create_base_app(title: str, description: str, settings: Settings, lifespan=None) -> FastAPI:
    app = FastAPI(
        title=title,
        description=description,
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(LoggingContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app


def create_books_app(schema: GraphQLSchema, settings: Settings | None = None) -> FastAPI:
    """Standalone books service: local schema, authors resolved in-process."""
    settings = settings or default_settings
    app = _create_base_app(
        "Bookshelf Books",
        "Books with locally resolved authors",
        settings,
    )
    app.include_router(create_graphql_router(schema, debug=settings.debug))
    logger.info("GraphQL endpoint initialized", service="books", endpoint=GRAPHQL_PATH)
    return app


def create_authors_app(store: DataStore | None = None, settings: Settings | None = None) -> FastAPI:
    """Authors service, the remote schema stitched into the gateway."""
    from ..authors.schema import create_graphql_router as create_authors_router
    from ..authors.schema import schema as authors_schema

    settings = settings or default_settings
    app = _create_base_app("Bookshelf Authors", "Author lookups by id", settings)

    logger.info("Validating authors schema...")
    validate_schema(authors_schema._schema)
    logger.info("Authors schema validation successful")
    app.include_router(create_authors_router(store), prefix="")
    logger.info("GraphQL endpoint initialized", service="authors", endpoint=GRAPHQL_PATH)
    return app


def create_gateway_app(gateway: GatewaySchema, settings: Settings | None = None) -> FastAPI:
    """Gateway: books stitched with the authors service.

    Takes an already composed schema, so the app can never serve a
    partially initialized one.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Bookshelf gateway...", remote=gateway.link.url)
        yield
        logger.info("Shutting down Bookshelf gateway...")
        await gateway.link.aclose()

    app = _create_base_app(
        "Bookshelf Gateway",
        "Books stitched with a remote authors schema",
        settings,
        lifespan=lifespan,
    )
    app.include_router(create_graphql_router(gateway.schema, debug=settings.debug))
    logger.info("GraphQL endpoint initialized", service="gateway", endpoint=GRAPHQL_PATH)
    return app
