"""Rate limit configuration value object for API throttling."""

from typing import Any

from flowcreate.core.domain.base import ValueObject
from flowcreate.core.errors import ValidationError


class RateLimitConfig(ValueObject):
    """Value object representing the call budget agreed with an external API."""

    def __init__(self, requests_per_minute: int, burst: int | None = None):
        """Initialize rate limit configuration.

        Raises:
            ValidationError: If configuration is invalid
        """
        super().__init__()
        if not isinstance(requests_per_minute, int) or requests_per_minute <= 0:
            raise ValidationError(
                "requests_per_minute must be a positive integer",
                field="requests_per_minute",
            )
        if burst is not None and (not isinstance(burst, int) or burst <= 0):
            raise ValidationError("burst must be a positive integer", field="burst")

        self.requests_per_minute = requests_per_minute
        self.burst = burst
        self._freeze()

    @property
    def min_interval_seconds(self) -> float:
        """Smallest spacing between two calls that respects the limit."""
        return 60.0 / self.requests_per_minute

    def to_dict(self) -> dict[str, Any]:
        return {"requests_per_minute": self.requests_per_minute, "burst": self.burst}

    def __str__(self) -> str:
        return f"{self.requests_per_minute} req/min"
