"""
Gateway schema: the local books schema stitched with the authors service
"""

from dataclasses import dataclass

import httpx
from graphql import GraphQLSchema

from .books import build_books_schema
from .config import Settings
from .logging import get_logger
from .stitching import BOOK_AUTHOR_DELEGATION, RemoteLink, SchemaComposer, load_remote_schema
from .store import DataStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class GatewaySchema:
    """The composed schema and the link its delegated fields use.

    Only ever created from a completed composition, so holding one means
    the schema is ready to serve.
    """

    schema: GraphQLSchema
    link: RemoteLink


async def compose_gateway_schema(
    settings: Settings,
    store: DataStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GatewaySchema:
    """Introspect the authors service and compose the gateway schema.

    Args:
        settings: Supplies the remote URL and timeout
        store: Local data store (defaults to the bundled fixtures)
        transport: Optional httpx transport for the remote link

    Raises:
        StitchingError: If the remote is unavailable or the schemas cannot be merged
    """
    local_schema = build_books_schema(store)

    async def load_remote():
        return await load_remote_schema(
            settings.remote_schema_url,
            timeout=settings.remote_timeout,
            transport=transport,
        )

    composer = SchemaComposer(local_schema, load_remote, delegations=(BOOK_AUTHOR_DELEGATION,))
    schema = await composer.compose()
    return GatewaySchema(schema=schema, link=composer.remote.link)
