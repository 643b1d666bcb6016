"""
Error types raised while building or executing the stitched schema
"""


class StitchingError(Exception):
    """Base class for schema stitching failures."""

    pass


class RemoteUnavailableError(StitchingError):
    """The remote GraphQL service could not be reached or answered garbage."""

    pass


class IntrospectionError(StitchingError):
    """The remote introspection result could not be turned into a schema."""

    pass


class SchemaCompositionError(StitchingError):
    """Local and remote schemas cannot be merged as configured."""

    pass


class DelegationError(StitchingError):
    """The remote service returned GraphQL errors for a delegated field."""

    def __init__(self, message: str, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []
