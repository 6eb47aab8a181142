"""Health and statistics DTOs for application layer."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from flowcreate.modules.integration.domain.value_objects import HealthAssessment


@dataclass(frozen=True)
class IntegrationHealthDTO:
    """DTO for integration health information."""

    integration_id: UUID
    integration_name: str
    status: str
    score: int
    issues: list[str]
    recommendations: list[str]
    assessed_at: datetime | None

    @classmethod
    def from_domain(
        cls, integration_id: UUID, integration_name: str, assessment: HealthAssessment
    ) -> "IntegrationHealthDTO":
        return cls(
            integration_id=integration_id,
            integration_name=integration_name,
            status=assessment.status.value,
            score=assessment.score,
            issues=list(assessment.issues),
            recommendations=list(assessment.recommendations),
            assessed_at=assessment.assessed_at,
        )

    @property
    def is_healthy(self) -> bool:
        return self.status == "healthy"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "integration_id": str(self.integration_id),
            "integration_name": self.integration_name,
            "status": self.status,
            "score": self.score,
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
            "assessed_at": self.assessed_at.isoformat() if self.assessed_at else None,
        }


@dataclass(frozen=True)
class IntegrationStatsDTO:
    """DTO for a user's aggregated integration statistics over a period."""

    period: str
    period_start: datetime
    period_end: datetime
    total_integrations: int
    active_integrations: int
    paused_integrations: int
    draft_integrations: int
    archived_integrations: int
    total_executions: int
    successful_executions: int
    failed_executions: int
    average_response_time_ms: float
    trends: dict[str, Any] = field(default_factory=dict)

    @property
    def success_rate(self) -> float | None:
        if self.total_executions == 0:
            return None
        return self.successful_executions / self.total_executions

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "period": self.period,
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "total_integrations": self.total_integrations,
            "active_integrations": self.active_integrations,
            "paused_integrations": self.paused_integrations,
            "draft_integrations": self.draft_integrations,
            "archived_integrations": self.archived_integrations,
            "total_executions": self.total_executions,
            "successful_executions": self.successful_executions,
            "failed_executions": self.failed_executions,
            "success_rate": self.success_rate,
            "average_response_time_ms": round(self.average_response_time_ms, 2),
            "trends": dict(self.trends),
        }
