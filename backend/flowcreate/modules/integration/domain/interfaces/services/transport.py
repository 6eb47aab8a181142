"""Transport boundary: how executions reach external systems."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from flowcreate.modules.integration.domain.value_objects import ApiEndpoint


@dataclass(frozen=True)
class TransportResponse:
    """What came back from one call."""

    status_code: int
    body: Any = None
    duration_ms: float = 0.0
    headers: dict[str, str] = field(default_factory=dict)
    bytes_received: int = 0

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class ITransport(ABC):
    """Sends one request to one endpoint.

    Implementations raise ``TransportError`` for network failures and honour
    ``timeout_seconds``; the caller additionally bounds the await.
    """

    @abstractmethod
    async def send(
        self,
        endpoint: ApiEndpoint,
        auth_headers: dict[str, str],
        payload: Any = None,
        headers: dict[str, str] | None = None,
        timeout_seconds: float = 30.0,
    ) -> TransportResponse:
        """Perform the call and return the response."""


class ISecretResolver(ABC):
    """Turns an opaque ``secret_ref`` into the secret value."""

    @abstractmethod
    async def resolve(self, secret_ref: str) -> str:
        """
        Raises:
            TransportError: If the secret cannot be resolved
        """
