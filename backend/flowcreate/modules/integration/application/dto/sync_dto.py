"""Sync job DTOs for application layer."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from flowcreate.modules.integration.application.dto.integration_dto import (
    IntegrationSummaryDTO,
)
from flowcreate.modules.integration.domain.aggregates import SyncJob


@dataclass(frozen=True)
class SyncJobDTO:
    """DTO for sync job information."""

    id: UUID
    owner_id: UUID
    integration_id: UUID
    mapping_id: UUID | None
    name: str
    description: str
    direction: str
    schedule: dict[str, Any]
    conflict_resolution: str
    batch_size: int
    key_field: str
    status: str
    retry_count: int
    last_error: str | None
    last_run_at: datetime | None
    next_run_at: datetime | None
    needs_attention: bool
    statistics: dict[str, Any]

    @classmethod
    def from_domain(cls, job: SyncJob) -> "SyncJobDTO":
        """Create DTO from domain model."""
        return cls(
            id=job.id,
            owner_id=job.owner_id,
            integration_id=job.integration_id,
            mapping_id=job.mapping_id,
            name=job.name,
            description=job.description,
            direction=job.direction.value,
            schedule=job.schedule.to_dict(),
            conflict_resolution=job.conflict_resolution.value,
            batch_size=job.batch_size,
            key_field=job.key_field,
            status=job.status.value,
            retry_count=job.retry_count,
            last_error=job.last_error,
            last_run_at=job.last_run_at,
            next_run_at=job.next_run_at,
            needs_attention=job.needs_attention(),
            statistics=job.execution_statistics(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": str(self.id),
            "owner_id": str(self.owner_id),
            "integration_id": str(self.integration_id),
            "mapping_id": str(self.mapping_id) if self.mapping_id else None,
            "name": self.name,
            "description": self.description,
            "direction": self.direction,
            "schedule": self.schedule,
            "conflict_resolution": self.conflict_resolution,
            "batch_size": self.batch_size,
            "key_field": self.key_field,
            "status": self.status,
            "retry_count": self.retry_count,
            "last_error": self.last_error,
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
            "next_run_at": self.next_run_at.isoformat() if self.next_run_at else None,
            "needs_attention": self.needs_attention,
            "statistics": self.statistics,
        }


@dataclass(frozen=True)
class UpcomingSyncJobDTO:
    """A due-soon sync job paired with its integration."""

    job: SyncJobDTO
    integration: IntegrationSummaryDTO
    next_run_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "job": self.job.to_dict(),
            "integration": self.integration.to_dict(),
            "next_run_at": self.next_run_at.isoformat(),
        }


@dataclass(frozen=True)
class SyncRunDTO:
    """Outcome of one sync run together with the job's updated state."""

    job: SyncJobDTO
    summary: dict[str, Any]

    @property
    def succeeded(self) -> bool:
        return self.summary.get("failed", 0) == 0

    def to_dict(self) -> dict[str, Any]:
        return {"job": self.job.to_dict(), "summary": self.summary}
