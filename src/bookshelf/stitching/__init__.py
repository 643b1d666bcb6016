"""Schema stitching: remote introspection, merging and delegated fields."""

from .composer import BOOK_AUTHOR_DELEGATION, CompositionState, SchemaComposer, compose_schemas
from .delegation import Delegation
from .errors import (
    DelegationError,
    IntrospectionError,
    RemoteUnavailableError,
    SchemaCompositionError,
    StitchingError,
)
from .link import RemoteLink
from .remote import RemoteSchema, load_remote_schema

__all__ = [
    "BOOK_AUTHOR_DELEGATION",
    "CompositionState",
    "Delegation",
    "DelegationError",
    "IntrospectionError",
    "RemoteLink",
    "RemoteSchema",
    "RemoteUnavailableError",
    "SchemaComposer",
    "SchemaCompositionError",
    "StitchingError",
    "compose_schemas",
    "load_remote_schema",
]
