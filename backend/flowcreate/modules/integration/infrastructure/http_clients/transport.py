"""HTTP transport for integration executions.

Wraps ``httpx.AsyncClient`` with connection pooling and an explicit timeout
on every call. Network failures and timeouts surface as ``TransportError``;
non-2xx responses are returned as-is for the caller to classify.
"""

import json
import time
from typing import Any

import httpx

from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.domain.errors import TransportError
from flowcreate.modules.integration.domain.interfaces.services import (
    ITransport,
    TransportResponse,
)
from flowcreate.modules.integration.domain.value_objects import ApiEndpoint

logger = get_logger(__name__)

USER_AGENT = "FlowCreate-Integration-Engine/1.0"


class HttpTransport(ITransport):
    """HTTP transport backed by a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        max_connections: int = 100,
        max_keepalive_connections: int = 20,
    ):
        """Initialize HTTP transport.

        Args:
            client: Optional pre-built client (e.g. with a mock transport)
            max_connections: Connection pool size
            max_keepalive_connections: Idle connections kept open
        """
        self._client = client
        self._owns_client = client is None
        self._limits = httpx.Limits(
            max_keepalive_connections=max_keepalive_connections,
            max_connections=max_connections,
        )

    async def __aenter__(self):
        """Async context manager entry."""
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                limits=self._limits,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        endpoint: ApiEndpoint,
        auth_headers: dict[str, str],
        payload: Any = None,
        headers: dict[str, str] | None = None,
        timeout_seconds: float = 30.0,
    ) -> TransportResponse:
        client = self._ensure_client()
        request_headers = {**endpoint.headers, **(headers or {}), **auth_headers}

        request_kwargs: dict[str, Any] = {
            "headers": request_headers,
            "timeout": httpx.Timeout(timeout_seconds),
        }
        if payload is not None:
            if endpoint.method.has_body:
                request_kwargs["json"] = payload
            elif isinstance(payload, dict):
                request_kwargs["params"] = payload

        start = time.perf_counter()
        try:
            response = await client.request(
                endpoint.method.value, endpoint.url, **request_kwargs
            )
        except httpx.TimeoutException as e:
            logger.warning(
                "Request timeout",
                method=endpoint.method.value,
                endpoint=endpoint.url,
                timeout_seconds=timeout_seconds,
            )
            raise TransportError(
                f"Request to {endpoint.host} timed out after {timeout_seconds:g}s",
                endpoint=endpoint.url,
                timed_out=True,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(
                "Connection error",
                method=endpoint.method.value,
                endpoint=endpoint.url,
                error=str(e),
            )
            raise TransportError(
                f"Request to {endpoint.host} failed: {e}", endpoint=endpoint.url
            ) from e

        duration_ms = (time.perf_counter() - start) * 1000
        return TransportResponse(
            status_code=response.status_code,
            body=self._decode_body(response),
            duration_ms=duration_ms,
            headers=dict(response.headers),
            bytes_received=len(response.content),
        )

    @staticmethod
    def _decode_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text
