"""API endpoint value object for external system connections."""

from typing import Any
from urllib.parse import urlparse

from flowcreate.core.domain.base import ValueObject
from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.domain.enums import HttpMethod


class ApiEndpoint(ValueObject):
    """Value object representing one callable endpoint of an integration.

    Holds everything the transport needs to issue a request: URL, method,
    static headers and the per-call timeout.
    """

    MAX_TIMEOUT_SECONDS = 300

    def __init__(
        self,
        url: str,
        method: HttpMethod | str = HttpMethod.GET,
        headers: dict[str, str] | None = None,
        timeout_seconds: float | None = None,
        name: str | None = None,
    ):
        """Initialize API endpoint.

        Args:
            url: Absolute http(s) URL
            method: HTTP method
            headers: Optional static headers sent with every call
            timeout_seconds: Optional per-call timeout, engine default when omitted
            name: Optional display name

        Raises:
            ValidationError: If endpoint configuration is invalid
        """
        super().__init__()
        self.url = self._validate_url(url)
        self.method = self._validate_method(method)
        self.headers = self._validate_headers(headers or {})

        if timeout_seconds is not None and not (
            0 < timeout_seconds <= self.MAX_TIMEOUT_SECONDS
        ):
            raise ValidationError(
                f"Timeout must be between 0 and {self.MAX_TIMEOUT_SECONDS} seconds",
                field="timeout_seconds",
            )
        self.timeout_seconds = timeout_seconds
        self.name = name or f"{self.method.value} {self.url}"

        self._freeze()

    @staticmethod
    def _validate_url(url: str) -> str:
        if not url or not url.strip():
            raise ValidationError("Endpoint URL cannot be empty", field="url")

        url = url.strip()
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            raise ValidationError("URL must use http or https scheme", field="url")
        if not parsed.netloc:
            raise ValidationError("URL must include a domain", field="url")
        return url

    @staticmethod
    def _validate_method(method: HttpMethod | str) -> HttpMethod:
        if isinstance(method, HttpMethod):
            return method
        try:
            return HttpMethod(str(method).upper())
        except ValueError as e:
            allowed = ", ".join(m.value for m in HttpMethod)
            raise ValidationError(
                f"Invalid HTTP method '{method}'. Must be one of: {allowed}",
                field="method",
            ) from e

    @staticmethod
    def _validate_headers(headers: dict[str, str]) -> dict[str, str]:
        validated = {}
        for key, value in headers.items():
            if not key or not str(key).strip():
                raise ValidationError("Header names cannot be empty", field="headers")
            validated[str(key).strip()] = str(value)
        return validated

    @property
    def host(self) -> str:
        return urlparse(self.url).netloc

    def effective_timeout(self, default_seconds: float) -> float:
        """Timeout to apply to a call, falling back to the engine default."""
        return self.timeout_seconds if self.timeout_seconds is not None else default_seconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "method": self.method.value,
            "headers": dict(self.headers),
            "timeout_seconds": self.timeout_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApiEndpoint":
        return cls(
            url=data.get("url", ""),
            method=data.get("method", HttpMethod.GET),
            headers=data.get("headers"),
            timeout_seconds=data.get("timeout_seconds"),
            name=data.get("name"),
        )

    def __str__(self) -> str:
        return f"{self.method.value} {self.url}"
