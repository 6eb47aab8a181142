"""Integration DTOs for application layer."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from flowcreate.modules.integration.domain.aggregates import Integration
from flowcreate.modules.integration.domain.value_objects import IntegrationMetrics


@dataclass(frozen=True)
class IntegrationMetricsDTO:
    """DTO for an integration's execution metrics."""

    integration_id: UUID
    total_requests: int
    successful_requests: int
    failed_requests: int
    average_response_time_ms: float
    success_rate: float | None
    uptime_percentage: float
    last_executed_at: datetime | None
    last_success_at: datetime | None
    last_failure_at: datetime | None
    last_error: str | None

    @classmethod
    def from_domain(
        cls, integration_id: UUID, metrics: IntegrationMetrics
    ) -> "IntegrationMetricsDTO":
        return cls(
            integration_id=integration_id,
            total_requests=metrics.total_requests,
            successful_requests=metrics.successful_requests,
            failed_requests=metrics.failed_requests,
            average_response_time_ms=metrics.average_response_time_ms,
            success_rate=metrics.success_rate,
            uptime_percentage=metrics.uptime_percentage,
            last_executed_at=metrics.last_executed_at,
            last_success_at=metrics.last_success_at,
            last_failure_at=metrics.last_failure_at,
            last_error=metrics.last_error,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "integration_id": str(self.integration_id),
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "average_response_time_ms": round(self.average_response_time_ms, 2),
            "success_rate": self.success_rate,
            "uptime_percentage": round(self.uptime_percentage, 2),
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


@dataclass(frozen=True)
class IntegrationDTO:
    """DTO for integration information."""

    id: UUID
    owner_id: UUID
    name: str
    description: str
    integration_type: str
    status: str
    tags: list[str]
    config: dict[str, Any]
    metrics: IntegrationMetricsDTO
    created_at: datetime
    updated_at: datetime
    version: int

    @classmethod
    def from_domain(cls, integration: Integration) -> "IntegrationDTO":
        """Create DTO from domain model."""
        return cls(
            id=integration.id,
            owner_id=integration.owner_id,
            name=integration.name,
            description=integration.description,
            integration_type=integration.integration_type.value,
            status=integration.status.value,
            tags=sorted(integration.tags),
            config=integration.config.to_dict(),
            metrics=IntegrationMetricsDTO.from_domain(integration.id, integration.metrics),
            created_at=integration.created_at,
            updated_at=integration.updated_at,
            version=integration.version,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": str(self.id),
            "owner_id": str(self.owner_id),
            "name": self.name,
            "description": self.description,
            "type": self.integration_type,
            "status": self.status,
            "tags": list(self.tags),
            "config": self.config,
            "metrics": self.metrics.to_dict(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "version": self.version,
        }


@dataclass(frozen=True)
class IntegrationSummaryDTO:
    """Lightweight integration reference used inside other results."""

    id: UUID
    name: str
    integration_type: str
    status: str

    @classmethod
    def from_domain(cls, integration: Integration) -> "IntegrationSummaryDTO":
        return cls(
            id=integration.id,
            name=integration.name,
            integration_type=integration.integration_type.value,
            status=integration.status.value,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "type": self.integration_type,
            "status": self.status,
        }
