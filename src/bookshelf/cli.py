#!/usr/bin/env python3
"""
Main CLI entry point for the Bookshelf services.
"""

import asyncio
import sys

import click

from bookshelf import __version__
from bookshelf.config import Settings, settings
from bookshelf.logging import configure_logging, get_logger

logger = get_logger(__name__)

LOG_LEVELS = click.Choice(["debug", "info", "warning", "error"])


def _settings_for(log_level: str, **overrides) -> Settings:
    updates = {key: value for key, value in overrides.items() if value is not None}
    updates["log_level"] = log_level.upper()
    if log_level == "debug":
        updates["debug"] = True
    return settings.model_copy(update=updates)


def _run(coro) -> None:
    try:
        exit_code = asyncio.run(coro)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
        exit_code = 0
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        exit_code = 1
    sys.exit(exit_code)


def server_options(default_port_help: str):
    def decorator(func):
        func = click.option(
            "--log-level",
            default="info",
            type=LOG_LEVELS,
            help="Log level (default: info)",
        )(func)
        func = click.option(
            "--port",
            default=None,
            type=int,
            help=f"Port to bind to (default: {default_port_help})",
        )(func)
        func = click.option(
            "--host",
            default=None,
            help="Host to bind to (default: BOOKSHELF_API_HOST or 0.0.0.0)",
        )(func)
        return func

    return decorator


@click.group()
@click.version_option(version=__version__, prog_name="bookshelf")
def cli() -> None:
    """Bookshelf CLI - run the books, authors and gateway GraphQL services."""
    pass


@cli.command()
@server_options("BOOKSHELF_API_PORT, PORT or 3000")
@click.option(
    "--remote-url",
    default=None,
    help="Authors service GraphQL URL (default: BOOKSHELF_REMOTE_SCHEMA_URL)",
)
def gateway(host: str | None, port: int | None, log_level: str, remote_url: str | None) -> None:
    """Serve books stitched with the remote authors schema."""
    from bookshelf.lifecycle import run_gateway

    config = _settings_for(log_level, remote_schema_url=remote_url)
    configure_logging(debug=config.debug, log_level=config.log_level)
    logger.info("Starting Bookshelf gateway", remote=config.remote_schema_url)
    _run(run_gateway(config, host=host, port=port))


@cli.command()
@server_options("BOOKSHELF_API_PORT, PORT or 3000")
def books(host: str | None, port: int | None, log_level: str) -> None:
    """Serve books with authors resolved locally (no stitching)."""
    from bookshelf.lifecycle import run_books

    config = _settings_for(log_level)
    configure_logging(debug=config.debug, log_level=config.log_level)
    logger.info("Starting Bookshelf books service")
    _run(run_books(config, host=host, port=port))


@cli.command()
@server_options("BOOKSHELF_AUTHORS_PORT or 3001")
def authors(host: str | None, port: int | None, log_level: str) -> None:
    """Serve the authors service the gateway introspects."""
    from bookshelf.lifecycle import run_authors

    config = _settings_for(log_level)
    configure_logging(debug=config.debug, log_level=config.log_level)
    logger.info("Starting Bookshelf authors service")
    _run(run_authors(config, host=host, port=port))


@cli.command()
@click.option(
    "--remote-url",
    default=None,
    help="Authors service GraphQL URL (default: BOOKSHELF_REMOTE_SCHEMA_URL)",
)
@click.option(
    "--composed",
    is_flag=True,
    default=False,
    help="Print the composed gateway schema instead of the remote one",
)
def introspect(remote_url: str | None, composed: bool) -> None:
    """Print the remote (or composed) schema as SDL."""
    from graphql import print_schema

    from bookshelf.gateway import compose_gateway_schema
    from bookshelf.stitching import StitchingError, load_remote_schema

    config = _settings_for("warning", remote_schema_url=remote_url)
    configure_logging(debug=False, log_level=config.log_level)

    async def fetch_sdl() -> str:
        if composed:
            gateway_schema = await compose_gateway_schema(config)
            await gateway_schema.link.aclose()
            return print_schema(gateway_schema.schema)

        remote = await load_remote_schema(config.remote_schema_url, timeout=config.remote_timeout)
        await remote.link.aclose()
        return print_schema(remote.schema)

    try:
        sdl = asyncio.run(fetch_sdl())
    except StitchingError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(sdl)


if __name__ == "__main__":
    cli()
