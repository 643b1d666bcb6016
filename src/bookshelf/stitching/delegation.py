"""
Delegated field resolution.

A ``Delegation`` declares that a field added to a local type is answered by
a root field of the remote schema, with the remote arguments taken from
fields of the local parent object.
"""

import inspect
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from graphql import (
    ArgumentNode,
    FieldNode,
    GraphQLObjectType,
    GraphQLResolveInfo,
    GraphQLSchema,
    NameNode,
    OperationType,
    VariableDefinitionNode,
    VariableNode,
    get_named_type,
    parse_type,
)

from ..logging import get_logger
from .documents import build_operation, document_to_string, merge_selection_sets
from .errors import SchemaCompositionError
from .link import RemoteLink
from .remote import unwrap_remote_result

logger = get_logger(__name__)

DELEGATED_VARIABLE_PREFIX = "_delegate_"


@dataclass(frozen=True)
class Delegation:
    """Declarative rule for one delegated field.

    Attributes:
        parent_type: Local type that gets the new field
        field_name: Name of the new field
        type_name: Remote type the field returns
        target_field: Remote root query field answering it
        arguments: Remote argument name -> parent field supplying its value
        requires: Extra parent fields that must be resolved before delegating
    """

    parent_type: str
    field_name: str
    type_name: str
    target_field: str
    arguments: Mapping[str, str] = field(default_factory=dict)
    requires: tuple[str, ...] = ()

    @property
    def required_fields(self) -> tuple[str, ...]:
        """Parent fields read before delegating, in declaration order."""
        names = [*self.requires, *self.arguments.values()]
        return tuple(dict.fromkeys(names))

    def extension_sdl(self) -> str:
        return f"extend type {self.parent_type} {{\n  {self.field_name}: {self.type_name}\n}}"


def validate_delegation(
    delegation: Delegation, local_schema: GraphQLSchema, remote_schema: GraphQLSchema
) -> None:
    """Check a delegation rule against both source schemas.

    Raises:
        SchemaCompositionError: If any referenced type, field or argument
            does not exist, or the remote field returns a different type
    """
    parent = local_schema.get_type(delegation.parent_type)
    if not isinstance(parent, GraphQLObjectType):
        raise SchemaCompositionError(
            f"Delegation parent type '{delegation.parent_type}' is not a local object type"
        )

    for name in delegation.required_fields:
        if name not in parent.fields:
            raise SchemaCompositionError(
                f"Delegated field {delegation.parent_type}.{delegation.field_name} "
                f"requires unknown field '{name}'"
            )

    remote_query = remote_schema.query_type
    if remote_query is None or delegation.target_field not in remote_query.fields:
        raise SchemaCompositionError(
            f"Remote schema has no query field '{delegation.target_field}'"
        )

    target = remote_query.fields[delegation.target_field]
    for argument in delegation.arguments:
        if argument not in target.args:
            raise SchemaCompositionError(
                f"Remote field '{delegation.target_field}' has no argument '{argument}'"
            )

    returned = get_named_type(target.type)
    if returned.name != delegation.type_name:
        raise SchemaCompositionError(
            f"Remote field '{delegation.target_field}' returns '{returned.name}', "
            f"not '{delegation.type_name}'"
        )


async def resolve_parent_field(
    obj: Any, parent_type: GraphQLObjectType, name: str, info: GraphQLResolveInfo
) -> Any:
    """Resolve ``name`` on a parent object with the parent type's own resolver.

    This is what guarantees required fields are available even when the
    client never selected them.
    """
    parent_field = parent_type.fields[name]
    if parent_field.resolve is not None:
        value = parent_field.resolve(obj, info)
        if inspect.isawaitable(value):
            value = await value
        return value

    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


class DelegatingResolver:
    """Resolver installed on a delegated field."""

    def __init__(self, delegation: Delegation, remote_schema: GraphQLSchema, link: RemoteLink):
        self.delegation = delegation
        self.link = link

        target = remote_schema.query_type.fields[delegation.target_field]
        # Argument types come from the remote schema so the operation validates there
        self.variable_definitions = tuple(
            VariableDefinitionNode(
                variable=VariableNode(name=NameNode(value=self.variable_name(argument))),
                type=parse_type(str(target.args[argument].type)),
                directives=(),
            )
            for argument in delegation.arguments
        )

    @staticmethod
    def variable_name(argument: str) -> str:
        return f"{DELEGATED_VARIABLE_PREFIX}{argument}"

    async def __call__(self, obj: Any, info: GraphQLResolveInfo, **_kwargs: Any) -> Any:
        delegation = self.delegation
        parent_values = {
            name: await resolve_parent_field(obj, info.parent_type, name, info)
            for name in delegation.required_fields
        }

        # Mapped arguments always come from the parent, never from the client
        variables = {
            self.variable_name(argument): parent_values[source]
            for argument, source in delegation.arguments.items()
        }
        field_node = FieldNode(
            name=NameNode(value=delegation.target_field),
            arguments=tuple(
                ArgumentNode(
                    name=NameNode(value=argument),
                    value=VariableNode(name=NameNode(value=self.variable_name(argument))),
                )
                for argument in delegation.arguments
            ),
            directives=(),
            selection_set=merge_selection_sets(info),
        )
        document, client_variables = build_operation(
            info,
            [field_node],
            operation=OperationType.QUERY,
            name="Delegate",
            variable_definitions=self.variable_definitions,
        )

        logger.debug(
            "Delegating field",
            field=f"{delegation.parent_type}.{delegation.field_name}",
            target=delegation.target_field,
            arguments=variables,
        )
        result = await self.link.execute(
            document_to_string(document), {**client_variables, **variables}
        )
        return unwrap_remote_result(result, delegation.target_field)
