"""
Startup validation for the GraphQL schemas the Bookshelf services serve.
"""

from graphql import GraphQLSchema, get_introspection_query, graphql_sync
from graphql import validate_schema as gql_validate_schema

from .logging import get_logger

logger = get_logger(__name__)


class SchemaValidationError(Exception):
    """Raised when a schema is invalid or cannot answer introspection."""

    pass


def validate_schema(schema: GraphQLSchema) -> None:
    """Validate a schema before it is served.

    Runs graphql-core schema validation and a full introspection round,
    which catches unresolvable type references.

    Raises:
        SchemaValidationError: If either check fails
    """
    errors = gql_validate_schema(schema)
    if errors:
        error_messages = [str(e) for e in errors]
        raise SchemaValidationError(
            f"GraphQL schema validation failed: {'; '.join(error_messages)}"
        )

    result = graphql_sync(schema, get_introspection_query())
    if result.errors:
        error_messages = [str(e) for e in result.errors]
        raise SchemaValidationError(f"GraphQL introspection failed: {'; '.join(error_messages)}")
