"""Derived health assessment of an integration."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from flowcreate.core.domain.base import ValueObject
from flowcreate.modules.integration.domain.enums import HealthStatus


@dataclass(frozen=True)
class HealthAssessment(ValueObject):
    """Score in ``[0, 100]`` with its status bucket and explanations."""

    status: HealthStatus
    score: int
    issues: tuple[str, ...] = field(default_factory=tuple)
    recommendations: tuple[str, ...] = field(default_factory=tuple)
    assessed_at: datetime | None = None

    @property
    def is_healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "score": self.score,
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
            "assessed_at": self.assessed_at.isoformat() if self.assessed_at else None,
        }

    def __str__(self) -> str:
        return f"{self.status} ({self.score}/100)"
