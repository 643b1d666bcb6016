"""
Shared pytest fixtures and configuration for all tests.
"""

import os
from collections.abc import AsyncGenerator, Generator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from bookshelf.config import Settings, settings
from bookshelf.gateway import GatewaySchema, compose_gateway_schema
from bookshelf.store import AUTHORS, BookRecord, DataStore, default_store

REMOTE_URL = "http://authors.test/graphql"


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing the gateway at the in-process authors service."""
    return settings.model_copy(
        update={
            "remote_schema_url": REMOTE_URL,
            "remote_timeout": 5.0,
            "debug": False,
            "shutdown_grace_period": 2.0,
        }
    )


@pytest.fixture
def store() -> DataStore:
    return default_store


@pytest.fixture
def store_with_unknown_author() -> DataStore:
    """The bundled books plus one whose author the authors service does not know."""
    books = {
        1: BookRecord(title="Jurassic Park", author_id=2),
        2: BookRecord(title="A Book Nobody Wrote", author_id=99),
        3: BookRecord(title="Harry Potter and the Chamber of Secrets", author_id=1),
    }
    return DataStore(books, AUTHORS)


@pytest.fixture
def authors_app() -> FastAPI:
    from bookshelf.api.app import create_authors_app

    return create_authors_app()


@pytest.fixture
def authors_transport(authors_app: FastAPI) -> httpx.ASGITransport:
    """Transport that routes the gateway's remote calls to the authors app."""
    return httpx.ASGITransport(app=authors_app)


@pytest.fixture
def unreachable_transport() -> httpx.MockTransport:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    return httpx.MockTransport(refuse)


@pytest_asyncio.fixture
async def gateway(
    test_settings: Settings, authors_transport: httpx.ASGITransport
) -> AsyncGenerator[GatewaySchema, None]:
    gateway_schema = await compose_gateway_schema(test_settings, transport=authors_transport)
    yield gateway_schema
    await gateway_schema.link.aclose()


@pytest_asyncio.fixture
async def gateway_client(
    gateway: GatewaySchema, test_settings: Settings
) -> AsyncGenerator[httpx.AsyncClient, None]:
    from bookshelf.api.app import create_gateway_app

    app = create_gateway_app(gateway, test_settings)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


# Test markers
def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")
