"""
Tests for the bookshelf command line
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from click.testing import CliRunner
from graphql import build_client_schema, get_introspection_query, graphql_sync

from bookshelf import __version__, cli as cli_module
from bookshelf.authors.schema import schema as authors_schema
from bookshelf.cli import cli
from bookshelf.stitching import RemoteSchema, RemoteUnavailableError


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def keep_logging_configuration(monkeypatch):
    monkeypatch.setattr(cli_module, "configure_logging", lambda **kwargs: None)


class TestCli:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_gateway_exit_code(self, runner, monkeypatch):
        seen = {}

        async def fake_run_gateway(config, host=None, port=None):
            seen.update(config=config, host=host, port=port)
            return 1

        monkeypatch.setattr("bookshelf.lifecycle.run_gateway", fake_run_gateway)

        result = runner.invoke(
            cli,
            ["gateway", "--remote-url", "http://authors.internal/graphql", "--port", "8080"],
        )

        assert result.exit_code == 1
        assert seen["config"].remote_schema_url == "http://authors.internal/graphql"
        assert seen["port"] == 8080
        assert seen["host"] is None

    def test_introspect_prints_remote_sdl(self, runner, monkeypatch):
        introspection = graphql_sync(authors_schema._schema, get_introspection_query())
        link = MagicMock(aclose=AsyncMock())

        async def fake_load_remote_schema(url, timeout=10.0):
            return RemoteSchema(schema=build_client_schema(introspection.data), link=link)

        monkeypatch.setattr("bookshelf.stitching.load_remote_schema", fake_load_remote_schema)

        result = runner.invoke(cli, ["introspect"])

        assert result.exit_code == 0
        assert "type Author {" in result.output
        link.aclose.assert_awaited_once()

    def test_introspect_unreachable(self, runner, monkeypatch):
        async def fake_load_remote_schema(url, timeout=10.0):
            raise RemoteUnavailableError(f"Cannot reach {url}")

        monkeypatch.setattr("bookshelf.stitching.load_remote_schema", fake_load_remote_schema)

        result = runner.invoke(cli, ["introspect", "--remote-url", "http://down.test/graphql"])

        assert result.exit_code == 1
        assert "Cannot reach http://down.test/graphql" in result.output
