"""
Configuration management for the Bookshelf services
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = Field(
        default=3000,
        validation_alias=AliasChoices("BOOKSHELF_API_PORT", "PORT"),
    )
    cors_origins: list[str] = ["http://localhost:3000"]

    # Authors service (the remote schema the gateway stitches in)
    authors_port: int = 3001

    # Remote schema
    remote_schema_url: str = "http://localhost:3001/graphql"
    remote_timeout: float = 10.0  # seconds, per introspection or delegation call

    # Lifecycle
    shutdown_grace_period: float = 10.0  # seconds allowed for in-flight requests

    # Logging
    debug: bool = True
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "BOOKSHELF_"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
