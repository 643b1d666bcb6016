"""
Bookshelf
GraphQL schema stitching demo: a local books schema merged with a remote authors service
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
