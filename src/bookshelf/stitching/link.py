"""
HTTP transport to a remote GraphQL endpoint
"""

from typing import Any

import httpx

from ..logging import get_logger, get_request_id
from .errors import RemoteUnavailableError

logger = get_logger(__name__)


class RemoteLink:
    """Posts GraphQL operations to one remote endpoint.

    The same link serves the startup introspection and every later
    delegation, so it owns a single ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self._http_client = httpx.AsyncClient(
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> dict[str, Any]:
        """Execute an operation and return the raw GraphQL response payload.

        Raises:
            RemoteUnavailableError: On transport failures, or when the remote
                does not answer with a GraphQL response body
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        if operation_name:
            payload["operationName"] = operation_name

        request_headers = {}
        if request_id := get_request_id():
            request_headers["X-Request-ID"] = request_id

        try:
            response = await self._http_client.post(
                self.url, json=payload, headers=request_headers
            )
        except httpx.HTTPError as e:
            logger.warning("Remote GraphQL request failed", url=self.url, error=str(e))
            raise RemoteUnavailableError(f"Cannot reach {self.url}: {e}") from e

        try:
            result = response.json()
        except ValueError as e:
            raise RemoteUnavailableError(
                f"Remote {self.url} answered HTTP {response.status_code} without JSON"
            ) from e

        if not isinstance(result, dict) or not ("data" in result or "errors" in result):
            raise RemoteUnavailableError(
                f"Remote {self.url} answered HTTP {response.status_code} "
                "without a GraphQL response"
            )

        return result

    async def aclose(self) -> None:
        await self._http_client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
