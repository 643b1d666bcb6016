"""
Tests for the remote link and schema introspection
"""

import json

import httpx
import pytest
from graphql import GraphQLObjectType

from bookshelf.logging import clear_request_context, set_request_context
from bookshelf.stitching import (
    DelegationError,
    IntrospectionError,
    RemoteLink,
    RemoteUnavailableError,
    load_remote_schema,
)
from bookshelf.stitching.remote import unwrap_remote_result

REMOTE_URL = "http://authors.test/graphql"


def json_transport(payload, status_code: int = 200) -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(status_code, json=payload))


@pytest.mark.integration
class TestLoadRemoteSchema:
    @pytest.mark.asyncio
    async def test_introspects_authors_service(self, authors_transport):
        remote = await load_remote_schema(REMOTE_URL, transport=authors_transport)

        try:
            author = remote.schema.get_type("Author")
            assert isinstance(author, GraphQLObjectType)
            assert set(author.fields) == {"id", "name"}

            author_field = remote.schema.query_type.fields["author"]
            assert str(author_field.args["id"].type) == "Int"
            assert remote.link.url == REMOTE_URL
        finally:
            await remote.link.aclose()

    @pytest.mark.asyncio
    async def test_unreachable_remote(self, unreachable_transport):
        with pytest.raises(RemoteUnavailableError, match="Cannot reach"):
            await load_remote_schema(REMOTE_URL, transport=unreachable_transport)

    @pytest.mark.asyncio
    async def test_introspection_errors(self):
        transport = json_transport({"errors": [{"message": "Introspection is disabled"}]})

        with pytest.raises(IntrospectionError, match="Introspection is disabled"):
            await load_remote_schema(REMOTE_URL, transport=transport)

    @pytest.mark.asyncio
    async def test_result_without_schema(self):
        transport = json_transport({"data": {"books": []}})

        with pytest.raises(IntrospectionError, match="__schema"):
            await load_remote_schema(REMOTE_URL, transport=transport)

    @pytest.mark.asyncio
    async def test_malformed_schema(self):
        transport = json_transport({"data": {"__schema": "nope"}})

        with pytest.raises(IntrospectionError, match="Malformed"):
            await load_remote_schema(REMOTE_URL, transport=transport)


@pytest.mark.unit
class TestRemoteLink:
    @pytest.mark.asyncio
    async def test_posts_graphql_payload(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": {"ok": True}})

        async with RemoteLink(REMOTE_URL, transport=httpx.MockTransport(handler)) as link:
            result = await link.execute("query Q($id: Int) { ok }", {"id": 1}, "Q")

        assert result == {"data": {"ok": True}}
        assert seen[0].method == "POST"
        assert str(seen[0].url) == REMOTE_URL
        assert json.loads(seen[0].content) == {
            "query": "query Q($id: Int) { ok }",
            "variables": {"id": 1},
            "operationName": "Q",
        }

    @pytest.mark.asyncio
    async def test_forwards_request_id(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": {}})

        set_request_context(request_id="req-123")
        try:
            async with RemoteLink(REMOTE_URL, transport=httpx.MockTransport(handler)) as link:
                await link.execute("{ ok }")
        finally:
            clear_request_context()

        assert seen[0].headers["X-Request-ID"] == "req-123"

    @pytest.mark.asyncio
    async def test_non_json_response(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway"))

        async with RemoteLink(REMOTE_URL, transport=transport) as link:
            with pytest.raises(RemoteUnavailableError, match="HTTP 502 without JSON"):
                await link.execute("{ ok }")

    @pytest.mark.asyncio
    async def test_json_that_is_not_graphql(self):
        transport = json_transport({"detail": "Not Found"}, status_code=404)

        async with RemoteLink(REMOTE_URL, transport=transport) as link:
            with pytest.raises(RemoteUnavailableError, match="without a GraphQL response"):
                await link.execute("{ ok }")


@pytest.mark.unit
class TestUnwrapRemoteResult:
    def test_returns_value_for_key(self):
        assert unwrap_remote_result({"data": {"author": {"name": "x"}}}, "author") == {"name": "x"}

    def test_missing_data(self):
        assert unwrap_remote_result({"data": None}, "author") is None

    def test_errors_raise(self):
        errors = [{"message": "Author 9 not found", "path": ["author"]}]

        with pytest.raises(DelegationError, match="Author 9 not found") as exc_info:
            unwrap_remote_result({"data": {"author": None}, "errors": errors}, "author")

        assert exc_info.value.errors == errors
