"""
Process lifecycle: compose first, then listen, then shut down on a signal.
"""

import signal
from types import FrameType

import httpx
import uvicorn
from fastapi import FastAPI

from .config import Settings
from .logging import get_logger
from .stitching import StitchingError

logger = get_logger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownHook:
    """Stops one uvicorn server when the process receives SIGINT or SIGTERM.

    uvicorn then stops accepting connections and lets in-flight requests
    finish within ``timeout_graceful_shutdown``.
    """

    def __init__(self, server: uvicorn.Server):
        self.server = server
        self.received: signal.Signals | None = None
        self._previous: dict[int, object] = {}

    def __call__(self, signum: int, frame: FrameType | None) -> None:
        _ = frame
        if self.received is None:
            self.received = signal.Signals(signum)
            logger.info("Shutting down", signal=self.received.name)
        self.server.should_exit = True

    def install(self) -> None:
        for sig in SHUTDOWN_SIGNALS:
            self._previous[sig] = signal.signal(sig, self)

    def uninstall(self) -> None:
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()


def create_server(app: FastAPI, host: str, port: int, settings: Settings) -> uvicorn.Server:
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
        log_config=None,  # keep the structlog configuration
        timeout_graceful_shutdown=settings.shutdown_grace_period,
    )
    return uvicorn.Server(config)


async def serve_app(app: FastAPI, host: str, port: int, settings: Settings) -> int:
    """Serve ``app`` until a shutdown signal arrives.

    Returns:
        Process exit code: 0 after a clean shutdown, 1 if serving failed
    """
    server = create_server(app, host, port, settings)
    hook = ShutdownHook(server)
    hook.install()

    logger.info("Listening", url=f"http://{host}:{port}/graphql")
    try:
        await server.serve()
    except Exception as e:
        logger.error("Server failed", error=str(e))
        return 1
    finally:
        hook.uninstall()

    logger.info("Server stopped")
    return 0


async def run_gateway(
    settings: Settings,
    host: str | None = None,
    port: int | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Compose the gateway schema, then serve it.

    No server is created unless composition succeeds.
    """
    from .api.app import create_gateway_app
    from .gateway import compose_gateway_schema

    try:
        gateway = await compose_gateway_schema(settings, transport=transport)
    except StitchingError as e:
        logger.error(
            "Gateway initialization failed",
            error=str(e),
            error_type=type(e).__name__,
            remote=settings.remote_schema_url,
        )
        return 1

    app = create_gateway_app(gateway, settings)
    return await serve_app(app, host or settings.api_host, port or settings.api_port, settings)


async def run_books(settings: Settings, host: str | None = None, port: int | None = None) -> int:
    """Serve the standalone books variant."""
    from .api.app import create_books_app
    from .books import build_books_schema

    app = create_books_app(build_books_schema(include_authors=True), settings)
    return await serve_app(app, host or settings.api_host, port or settings.api_port, settings)


async def run_authors(settings: Settings, host: str | None = None, port: int | None = None) -> int:
    """Serve the authors service."""
    from .api.app import create_authors_app

    app = create_authors_app(settings=settings)
    return await serve_app(app, host or settings.api_host, port or settings.authors_port, settings)
