"""
Test cases for the httpx-backed transport.

Requests are served by ``httpx.MockTransport`` so nothing leaves the process.
"""

import json

import httpx
import pytest

from flowcreate.modules.integration.domain.enums import HttpMethod
from flowcreate.modules.integration.domain.errors import TransportError
from flowcreate.modules.integration.domain.value_objects import ApiEndpoint
from flowcreate.modules.integration.infrastructure.http_clients import HttpTransport


def _transport(handler) -> HttpTransport:
    return HttpTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.unit
class TestHttpTransport:
    """Test request building and response decoding."""

    @pytest.mark.asyncio
    async def test_get_sends_payload_as_query_params(self):
        """Test GET payloads become query parameters and headers are layered."""
        # Arrange
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"items": [1, 2]})

        endpoint = ApiEndpoint(
            "https://api.example.com/v1/contacts",
            HttpMethod.GET,
            headers={"X-Tenant": "acme", "X-Request-Id": "static"},
        )

        # Act
        async with _transport(handler) as transport:
            response = await transport.send(
                endpoint,
                {"Authorization": "Bearer token"},
                payload={"since": "2024-01-01"},
                headers={"X-Request-Id": "abc"},
            )

        # Assert
        request = seen[0]
        assert request.method == "GET"
        assert request.url.params["since"] == "2024-01-01"
        assert request.headers["X-Tenant"] == "acme"
        assert request.headers["X-Request-Id"] == "abc"
        assert request.headers["Authorization"] == "Bearer token"
        assert response.status_code == 200
        assert response.is_success
        assert response.body == {"items": [1, 2]}
        assert response.bytes_received > 0
        assert response.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={"id": "c-1"})

        endpoint = ApiEndpoint("https://api.example.com/v1/contacts", HttpMethod.POST)

        async with _transport(handler) as transport:
            response = await transport.send(endpoint, {}, payload={"name": "Ada"})

        assert bodies == [{"name": "Ada"}]
        assert response.status_code == 201
        assert response.body == {"id": "c-1"}

    @pytest.mark.asyncio
    async def test_error_status_is_returned_not_raised(self):
        """Test classification of HTTP errors is left to the caller."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="maintenance")

        endpoint = ApiEndpoint("https://api.example.com/v1/contacts")

        async with _transport(handler) as transport:
            response = await transport.send(endpoint, {})

        assert response.status_code == 503
        assert not response.is_success
        assert response.body == "maintenance"

    @pytest.mark.asyncio
    async def test_empty_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204)

        async with _transport(handler) as transport:
            response = await transport.send(ApiEndpoint("https://api.example.com/ping"), {})

        assert response.body is None
        assert response.bytes_received == 0

    @pytest.mark.asyncio
    async def test_timeout_becomes_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        endpoint = ApiEndpoint("https://api.example.com/slow")

        async with _transport(handler) as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.send(endpoint, {}, timeout_seconds=2.5)

        error = exc_info.value
        assert error.timed_out
        assert error.code == "TRANSPORT_TIMEOUT"
        assert error.message == "Request to api.example.com timed out after 2.5s"
        assert error.endpoint == "https://api.example.com/slow"

    @pytest.mark.asyncio
    async def test_connection_failure_becomes_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _transport(handler) as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.send(ApiEndpoint("https://api.example.com/down"), {})

        assert not exc_info.value.timed_out
        assert exc_info.value.code == "TRANSPORT_ERROR"
        assert "connection refused" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self):
        """Test a caller-owned client outlives the transport."""
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200))
        )

        async with HttpTransport(client=client):
            pass

        assert not client.is_closed
        await client.aclose()
