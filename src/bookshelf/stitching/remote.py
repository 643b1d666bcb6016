"""
Remote schema client: introspects a remote GraphQL service and turns the
result into an executable local shadow of it.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from ariadne import ObjectType
from graphql import (
    GraphQLError,
    GraphQLObjectType,
    GraphQLResolveInfo,
    GraphQLSchema,
    OperationType,
    build_client_schema,
    get_introspection_query,
)

from ..logging import get_logger
from .documents import build_operation, document_to_string
from .errors import DelegationError, IntrospectionError
from .link import RemoteLink

logger = get_logger(__name__)


@dataclass(frozen=True)
class RemoteSchema:
    """An introspected remote schema and the link its fields execute over."""

    schema: GraphQLSchema
    link: RemoteLink


def resolve_response_key(obj: Any, info: GraphQLResolveInfo, **_kwargs: Any) -> Any:
    """Read a value from a remote result.

    Remote results are keyed by response key (alias or field name) because
    the client's selection is forwarded verbatim.
    """
    if isinstance(obj, Mapping):
        return obj.get(info.path.key)
    return getattr(obj, info.field_name, None)


def unwrap_remote_result(result: dict[str, Any], response_key: str | int) -> Any:
    """Return the value for ``response_key`` or raise the remote errors."""
    errors = result.get("errors") or []
    if errors:
        messages = "; ".join(str(error.get("message", error)) for error in errors)
        raise DelegationError(messages, errors)

    data = result.get("data") or {}
    return data.get(response_key)


class RemoteRootFieldResolver:
    """Forwards a root field, with the client's selection, to the remote service."""

    def __init__(self, link: RemoteLink, operation: OperationType):
        self.link = link
        self.operation = operation

    async def __call__(self, _obj: Any, info: GraphQLResolveInfo, **_kwargs: Any) -> Any:
        document, variables = build_operation(info, info.field_nodes, operation=self.operation)
        result = await self.link.execute(document_to_string(document), variables)
        return unwrap_remote_result(result, info.path.key)


async def introspect_schema(link: RemoteLink) -> GraphQLSchema:
    """Run the standard introspection query through ``link``.

    Raises:
        RemoteUnavailableError: If the remote cannot be reached
        IntrospectionError: If the remote answers with errors or a result
            that does not describe a schema
    """
    result = await link.execute(get_introspection_query(descriptions=True))

    if result.get("errors"):
        messages = "; ".join(str(error.get("message", error)) for error in result["errors"])
        raise IntrospectionError(f"Remote introspection returned errors: {messages}")

    data = result.get("data")
    if not isinstance(data, dict) or "__schema" not in data:
        raise IntrospectionError("Remote introspection result is missing '__schema'")

    try:
        return build_client_schema(data)
    except (TypeError, KeyError, GraphQLError) as e:
        raise IntrospectionError(f"Malformed introspection result: {e}") from e


def make_remote_executable_schema(schema: GraphQLSchema, link: RemoteLink) -> GraphQLSchema:
    """Attach resolvers to an introspected schema, in place.

    Root query and mutation fields forward to the remote service; fields of
    every other object type read from the forwarded result by response key.
    """
    root_types = {
        OperationType.QUERY: schema.query_type,
        OperationType.MUTATION: schema.mutation_type,
    }
    root_names = {root.name for root in root_types.values() if root is not None}

    bindables: list[ObjectType] = []
    for operation, root in root_types.items():
        if root is None:
            continue
        bindable = ObjectType(root.name)
        forward = RemoteRootFieldResolver(link, operation)
        for field_name in root.fields:
            bindable.set_field(field_name, forward)
        bindables.append(bindable)

    for type_name, graphql_type in schema.type_map.items():
        if type_name.startswith("__") or type_name in root_names:
            continue
        if not isinstance(graphql_type, GraphQLObjectType):
            continue
        bindable = ObjectType(type_name)
        for field_name in graphql_type.fields:
            bindable.set_field(field_name, resolve_response_key)
        bindables.append(bindable)

    for bindable in bindables:
        bindable.bind_to_schema(schema)

    return schema


async def load_remote_schema(
    url: str,
    timeout: float = 10.0,
    headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RemoteSchema:
    """Introspect ``url`` once and return the executable remote schema with its link.

    The link is closed again if introspection fails.
    """
    link = RemoteLink(url, timeout=timeout, headers=headers, transport=transport)
    logger.info("Introspecting remote schema", url=url)

    try:
        schema = await introspect_schema(link)
    except Exception:
        await link.aclose()
        raise

    make_remote_executable_schema(schema, link)
    logger.info(
        "Remote schema introspected",
        url=url,
        types=sorted(name for name in schema.type_map if not name.startswith("__")),
    )
    return RemoteSchema(schema=schema, link=link)
