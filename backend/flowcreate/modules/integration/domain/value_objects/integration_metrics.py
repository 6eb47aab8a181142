"""Accumulated execution metrics of an integration."""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from flowcreate.core.domain.base import ValueObject
from flowcreate.core.errors import ValidationError


@dataclass(frozen=True)
class IntegrationMetrics(ValueObject):
    """Immutable snapshot of an integration's execution counters.

    Every recorded execution produces a new snapshot, so a reader holding a
    reference never observes a half-applied update.
    """

    total_requests: int = 0
    successful_requests: int = 0
    average_response_time_ms: float = 0.0
    last_executed_at: datetime | None = None
    last_success_at: datetime | None = None
    last_failure_at: datetime | None = None
    last_error: str | None = None

    def __post_init__(self) -> None:
        if self.total_requests < 0 or self.successful_requests < 0:
            raise ValidationError("Request counters cannot be negative")
        if self.successful_requests > self.total_requests:
            raise ValidationError("successful_requests cannot exceed total_requests")

    @property
    def failed_requests(self) -> int:
        return self.total_requests - self.successful_requests

    @property
    def success_rate(self) -> float | None:
        """Ratio of successful requests in ``[0, 1]``, None before any request."""
        if self.total_requests == 0:
            return None
        return self.successful_requests / self.total_requests

    @property
    def uptime_percentage(self) -> float:
        rate = self.success_rate
        return 100.0 if rate is None else rate * 100

    def record(
        self,
        success: bool,
        duration_ms: float,
        at: datetime,
        error: str | None = None,
    ) -> "IntegrationMetrics":
        """Return the snapshot that follows one more execution.

        The mean is updated incrementally: ``avg + (d - avg) / n``.
        """
        total = self.total_requests + 1
        average = self.average_response_time_ms + (
            float(duration_ms) - self.average_response_time_ms
        ) / total
        if success:
            return replace(
                self,
                total_requests=total,
                successful_requests=self.successful_requests + 1,
                average_response_time_ms=average,
                last_executed_at=at,
                last_success_at=at,
            )
        return replace(
            self,
            total_requests=total,
            average_response_time_ms=average,
            last_executed_at=at,
            last_failure_at=at,
            last_error=error,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "average_response_time_ms": round(self.average_response_time_ms, 3),
            "success_rate": self.success_rate,
            "uptime_percentage": self.uptime_percentage,
            "last_executed_at": self.last_executed_at.isoformat()
            if self.last_executed_at
            else None,
            "last_success_at": self.last_success_at.isoformat()
            if self.last_success_at
            else None,
            "last_failure_at": self.last_failure_at.isoformat()
            if self.last_failure_at
            else None,
            "last_error": self.last_error,
        }

    def __str__(self) -> str:
        return f"{self.successful_requests}/{self.total_requests} successful"
