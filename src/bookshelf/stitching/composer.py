"""
Schema composition: merge the local schema with the introspected remote
schema and install the delegated fields.

Composition is a single pass::

    START -> INTROSPECTING -> MERGING -> READY
                  |              |
                  +--> FAILED <--+

and a composer never runs twice.
"""

from collections.abc import Awaitable, Callable, Sequence
from enum import Enum

from ariadne import ObjectType
from graphql import (
    GraphQLError,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    extend_schema,
    introspection_types,
    parse,
    specified_directives,
    specified_scalar_types,
)

from ..logging import get_logger
from ..validation import SchemaValidationError, validate_schema
from .delegation import Delegation, DelegatingResolver, validate_delegation
from .errors import SchemaCompositionError
from .remote import RemoteSchema

logger = get_logger(__name__)

BUILTIN_TYPE_NAMES = frozenset(specified_scalar_types) | frozenset(introspection_types)
BUILTIN_DIRECTIVE_NAMES = frozenset(directive.name for directive in specified_directives)

# Book.author is answered by the remote `author(id:)` with id <- Book.authorId
BOOK_AUTHOR_DELEGATION = Delegation(
    parent_type="Book",
    field_name="author",
    type_name="Author",
    target_field="author",
    arguments={"id": "authorId"},
    requires=("authorId",),
)


class CompositionState(str, Enum):
    START = "start"
    INTROSPECTING = "introspecting"
    MERGING = "merging"
    READY = "ready"
    FAILED = "failed"


def _root_types(schema: GraphQLSchema) -> dict[str, GraphQLObjectType | None]:
    return {
        "query": schema.query_type,
        "mutation": schema.mutation_type,
        "subscription": schema.subscription_type,
    }


def _merge_root(
    operation: str, local: GraphQLObjectType | None, remote: GraphQLObjectType | None
) -> GraphQLObjectType | None:
    if local is None or remote is None:
        return local or remote

    collisions = sorted(set(local.fields) & set(remote.fields))
    if collisions:
        raise SchemaCompositionError(
            f"Root {operation} fields defined by both schemas: {', '.join(collisions)}"
        )

    return GraphQLObjectType(
        local.name,
        fields={**local.fields, **remote.fields},
        description=local.description,
    )


def merge_schemas(local: GraphQLSchema, remote: GraphQLSchema) -> GraphQLSchema:
    """Union two schemas without modifying either.

    Root types are merged field by field; every other named type and every
    custom directive must be defined by exactly one side.

    Raises:
        SchemaCompositionError: On a type, root field or directive collision
    """
    local_roots = _root_types(local)
    remote_roots = _root_types(remote)
    root_names = {root.name for root in (*local_roots.values(), *remote_roots.values()) if root}

    def named_types(schema: GraphQLSchema) -> dict[str, GraphQLNamedType]:
        return {
            name: graphql_type
            for name, graphql_type in schema.type_map.items()
            if name not in BUILTIN_TYPE_NAMES and name not in root_names
        }

    local_types = named_types(local)
    remote_types = named_types(remote)

    collisions = sorted(set(local_types) & set(remote_types))
    if collisions:
        raise SchemaCompositionError(
            f"Types defined by both local and remote schemas: {', '.join(collisions)}"
        )

    local_directives = {directive.name for directive in local.directives}
    remote_directives = [
        directive
        for directive in remote.directives
        if directive.name not in BUILTIN_DIRECTIVE_NAMES
    ]
    clashing = sorted(
        directive.name for directive in remote_directives if directive.name in local_directives
    )
    if clashing:
        raise SchemaCompositionError(
            f"Directives defined by both local and remote schemas: {', '.join(clashing)}"
        )

    merged_roots = {
        operation: _merge_root(operation, local_roots[operation], remote_roots[operation])
        for operation in local_roots
    }

    try:
        return GraphQLSchema(
            query=merged_roots["query"],
            mutation=merged_roots["mutation"],
            subscription=merged_roots["subscription"],
            types=[*local_types.values(), *remote_types.values()],
            directives=[*local.directives, *remote_directives],
            description=local.description,
        )
    except TypeError as e:
        raise SchemaCompositionError(f"Cannot merge schemas: {e}") from e


def apply_delegations(
    schema: GraphQLSchema,
    local: GraphQLSchema,
    remote: RemoteSchema,
    delegations: Sequence[Delegation],
) -> GraphQLSchema:
    """Add every delegated field to ``schema`` and bind its resolver."""
    for delegation in delegations:
        validate_delegation(delegation, local, remote.schema)

    if not delegations:
        return schema

    extension = "\n\n".join(delegation.extension_sdl() for delegation in delegations)
    try:
        extended = extend_schema(schema, parse(extension))
    except GraphQLError as e:
        raise SchemaCompositionError(f"Cannot apply type extensions: {e}") from e

    bindables: dict[str, ObjectType] = {}
    for delegation in delegations:
        bindable = bindables.setdefault(delegation.parent_type, ObjectType(delegation.parent_type))
        bindable.set_field(
            delegation.field_name,
            DelegatingResolver(delegation, remote.schema, remote.link),
        )

    try:
        for bindable in bindables.values():
            bindable.bind_to_schema(extended)
    except ValueError as e:
        raise SchemaCompositionError(str(e)) from e

    return extended


def compose_schemas(
    local: GraphQLSchema,
    remote: RemoteSchema,
    delegations: Sequence[Delegation] = (BOOK_AUTHOR_DELEGATION,),
) -> GraphQLSchema:
    """Merge, extend, bind and validate. Synchronous and side-effect free on its inputs."""
    merged = merge_schemas(local, remote.schema)
    composed = apply_delegations(merged, local, remote, delegations)
    try:
        validate_schema(composed)
    except SchemaValidationError as e:
        raise SchemaCompositionError(str(e)) from e
    return composed


class SchemaComposer:
    """Runs the one-shot composition of the gateway schema.

    Args:
        local_schema: The executable local schema
        load_remote: Coroutine factory returning the introspected remote schema
        delegations: Delegated fields to install
    """

    def __init__(
        self,
        local_schema: GraphQLSchema,
        load_remote: Callable[[], Awaitable[RemoteSchema]],
        delegations: Sequence[Delegation] = (BOOK_AUTHOR_DELEGATION,),
    ):
        self.local_schema = local_schema
        self.load_remote = load_remote
        self.delegations = tuple(delegations)
        self.state = CompositionState.START
        self.remote: RemoteSchema | None = None

    def _transition(self, state: CompositionState) -> None:
        logger.debug("Schema composition state", previous=self.state.value, state=state.value)
        self.state = state

    async def compose(self) -> GraphQLSchema:
        """Compose the gateway schema.

        Raises:
            RuntimeError: If this composer already ran
            StitchingError: If introspection or merging fails; nothing is
                returned in that case
        """
        if self.state is not CompositionState.START:
            raise RuntimeError(f"Schema composition already ran (state: {self.state.value})")

        try:
            self._transition(CompositionState.INTROSPECTING)
            self.remote = await self.load_remote()

            self._transition(CompositionState.MERGING)
            schema = compose_schemas(self.local_schema, self.remote, self.delegations)
        except Exception as e:
            self._transition(CompositionState.FAILED)
            logger.error("Schema composition failed", error=str(e))
            if self.remote is not None:
                await self.remote.link.aclose()
            raise

        self._transition(CompositionState.READY)
        logger.info(
            "Schema composition complete",
            delegated_fields=[f"{d.parent_type}.{d.field_name}" for d in self.delegations],
        )
        return schema
