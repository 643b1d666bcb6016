"""
Builds the GraphQL documents sent to the remote service.

A forwarded operation must be valid on its own: it carries only the
fragments and variable definitions its selections actually reference, and
variable values are re-serialized from the coerced values graphql-core
hands to resolvers.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from graphql import (
    DocumentNode,
    FragmentDefinitionNode,
    GraphQLResolveInfo,
    NameNode,
    Node,
    OperationDefinitionNode,
    OperationType,
    SelectionNode,
    SelectionSetNode,
    Undefined,
    VariableDefinitionNode,
    Visitor,
    ast_from_value,
    print_ast,
    type_from_ast,
    value_from_ast_untyped,
    visit,
)


class _ReferenceCollector(Visitor):
    """Collects variable and fragment names referenced below a node."""

    def __init__(self):
        super().__init__()
        self.variables: set[str] = set()
        self.fragments: set[str] = set()

    def enter_variable(self, node, *_args):
        self.variables.add(node.name.value)

    def enter_fragment_spread(self, node, *_args):
        self.fragments.add(node.name.value)


def collect_references(
    nodes: Iterable[Node], fragments: dict[str, FragmentDefinitionNode]
) -> tuple[set[str], list[FragmentDefinitionNode]]:
    """Return the variables and (transitively) the fragments used by ``nodes``.

    Fragments come back in the order the client defined them.
    """
    variables: set[str] = set()
    seen: set[str] = set()
    pending: list[Node] = list(nodes)

    while pending:
        collector = _ReferenceCollector()
        visit(pending.pop(), collector)
        variables |= collector.variables
        for name in collector.fragments - seen:
            seen.add(name)
            if name in fragments:
                pending.append(fragments[name])

    return variables, [definition for name, definition in fragments.items() if name in seen]


def serialize_variable(info: GraphQLResolveInfo, definition: VariableDefinitionNode) -> Any:
    """Turn a coerced variable value back into its JSON input form."""
    name = definition.variable.name.value
    value = info.variable_values.get(name, Undefined)
    if value is Undefined:
        return Undefined

    graphql_type = type_from_ast(info.schema, definition.type)
    if graphql_type is None:
        return value

    value_ast = ast_from_value(value, graphql_type)
    return value_from_ast_untyped(value_ast) if value_ast else None


def build_operation(
    info: GraphQLResolveInfo,
    selections: Sequence[SelectionNode],
    operation: OperationType = OperationType.QUERY,
    name: str | None = None,
    variable_definitions: Sequence[VariableDefinitionNode] = (),
) -> tuple[DocumentNode, dict[str, Any]]:
    """Wrap ``selections`` into a standalone operation document.

    Args:
        info: Resolve info of the field being forwarded; supplies the client's
            fragments, variable definitions and variable values
        selections: Root selections of the new operation
        operation: Operation type of the new document
        name: Optional operation name
        variable_definitions: Extra definitions owned by the caller (their
            values are the caller's responsibility)

    Returns:
        The document and the client variable values it needs
    """
    used_variables, fragment_definitions = collect_references(selections, info.fragments)

    client_definitions = [
        definition
        for definition in (info.operation.variable_definitions or ())
        if definition.variable.name.value in used_variables
    ]
    values = {}
    for definition in client_definitions:
        value = serialize_variable(info, definition)
        if value is not Undefined:
            values[definition.variable.name.value] = value

    operation_node = OperationDefinitionNode(
        operation=operation,
        name=NameNode(value=name) if name else None,
        variable_definitions=(*variable_definitions, *client_definitions),
        directives=(),
        selection_set=SelectionSetNode(selections=tuple(selections)),
    )
    document = DocumentNode(definitions=(operation_node, *fragment_definitions))
    return document, values


def merge_selection_sets(info: GraphQLResolveInfo) -> SelectionSetNode | None:
    """Combine the sub-selections of every field node sharing this response key."""
    selections = [
        selection
        for field_node in info.field_nodes
        if field_node.selection_set
        for selection in field_node.selection_set.selections
    ]
    if not selections:
        return None
    return SelectionSetNode(selections=tuple(selections))


def document_to_string(document: DocumentNode) -> str:
    return print_ast(document)
