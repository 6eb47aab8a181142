"""SyncJob aggregate for recurring synchronization."""

from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from flowcreate.core.domain.base import AggregateRoot, utc_now
from flowcreate.core.errors import PreconditionFailedError, ValidationError
from flowcreate.modules.integration.domain.enums import (
    ConflictResolution,
    SyncDirection,
    SyncJobStatus,
)
from flowcreate.modules.integration.domain.events import SyncJobCreated, SyncRunCompleted
from flowcreate.modules.integration.domain.value_objects import (
    DataSchema,
    SyncRunSummary,
    SyncSchedule,
)

MAX_BATCH_SIZE = 10_000
MAX_RETRIES_LIMIT = 10
RETRY_BASE_DELAY = timedelta(minutes=1)
HISTORY_LIMIT = 50


class SyncJob(AggregateRoot):
    """Scheduled application of a DataMapping over an Integration.

    References its integration and mapping by id only.
    """

    def __init__(
        self,
        owner_id: UUID,
        integration_id: UUID,
        name: str,
        direction: SyncDirection,
        schedule: SyncSchedule,
        conflict_resolution: ConflictResolution,
        batch_size: int,
        description: str | None = None,
        source_schema: DataSchema | None = None,
        target_schema: DataSchema | None = None,
        mapping_id: UUID | None = None,
        key_field: str = "id",
        max_retries: int = 3,
        max_batch_size: int = MAX_BATCH_SIZE,
        now: datetime | None = None,
        entity_id: UUID | None = None,
    ):
        super().__init__(entity_id)

        field_errors: dict[str, list[str]] = {}
        if not name or not name.strip():
            field_errors.setdefault("name", []).append("Sync job name cannot be empty")
        if not isinstance(batch_size, int) or not 1 <= batch_size <= max_batch_size:
            field_errors.setdefault("batch_size", []).append(
                f"Batch size must be between 1 and {max_batch_size}"
            )
        if not isinstance(max_retries, int) or not 0 <= max_retries <= MAX_RETRIES_LIMIT:
            field_errors.setdefault("max_retries", []).append(
                f"Max retries must be between 0 and {MAX_RETRIES_LIMIT}"
            )
        if not key_field or not key_field.strip():
            field_errors.setdefault("key_field", []).append("Key field cannot be empty")
        if field_errors:
            raise ValidationError.from_fields(field_errors)

        self.owner_id = owner_id
        self.integration_id = integration_id
        self.mapping_id = mapping_id
        self.name = name.strip()
        self.description = (description or "").strip()
        self.direction = SyncDirection(direction)
        self.schedule = schedule
        self.conflict_resolution = ConflictResolution(conflict_resolution)
        self.batch_size = batch_size
        self.max_batch_size = max_batch_size
        self.source_schema = source_schema
        self.target_schema = target_schema
        self.key_field = key_field.strip()
        self.max_retries = max_retries

        self.status = SyncJobStatus.IDLE
        self.retry_count = 0
        self.last_error: str | None = None
        self.last_run_at: datetime | None = None
        self.next_run_at: datetime | None = None
        self.run_history: list[SyncRunSummary] = []

        self._reschedule(now or utc_now())
        self.add_event(SyncJobCreated(self.id, integration_id, owner_id))

    def is_owned_by(self, user_id: UUID) -> bool:
        return self.owner_id == user_id

    @property
    def is_enabled(self) -> bool:
        return self.schedule.enabled

    def _reschedule(self, now: datetime) -> None:
        if not self.is_enabled:
            self.next_run_at = None
            return
        self.next_run_at = self.schedule.next_run_after(self.last_run_at, now)

    def resolve_next_run(self, now: datetime) -> datetime | None:
        """Next due instant, or None when the schedule is disabled."""
        if not self.is_enabled:
            return None
        if self.next_run_at is not None:
            return self.next_run_at
        return self.schedule.next_run_after(self.last_run_at, now)

    def is_due(self, now: datetime) -> bool:
        next_run = self.resolve_next_run(now)
        return next_run is not None and next_run <= now

    def start_run(self) -> None:
        """
        Raises:
            PreconditionFailedError: If a run is already in progress
        """
        if self.status.is_running:
            raise PreconditionFailedError("run sync job", "a run is already in progress")
        self.status = SyncJobStatus.RUNNING
        self.mark_modified()

    def complete_run(self, summary: SyncRunSummary, now: datetime | None = None) -> None:
        """Record a finished run and advance ``last_run_at`` and ``next_run_at``."""
        now = now or utc_now()
        self.status = SyncJobStatus.COMPLETED
        self.retry_count = 0
        self.last_error = None
        self.last_run_at = now
        self._append_history(summary)
        self._reschedule(now)
        self.increment_version()
        self.add_event(
            SyncRunCompleted(self.id, True, summary.records_processed, summary.failed)
        )

    def fail_run(
        self,
        reason: str,
        now: datetime | None = None,
        summary: SyncRunSummary | None = None,
    ) -> None:
        """Record a failed run.

        While retries remain the next attempt is scheduled after an
        exponential backoff of one minute times ``2 ** (retry - 1)``.
        """
        now = now or utc_now()
        self.status = SyncJobStatus.FAILED
        self.last_error = reason
        self.last_run_at = now
        self.retry_count += 1
        if summary is not None:
            self._append_history(summary)

        if self.is_enabled and self.retry_count <= self.max_retries:
            self.next_run_at = now + RETRY_BASE_DELAY * (2 ** (self.retry_count - 1))
        else:
            self._reschedule(now)

        self.increment_version()
        self.add_event(
            SyncRunCompleted(
                self.id,
                False,
                summary.records_processed if summary else 0,
                summary.failed if summary else 0,
            )
        )

    def _append_history(self, summary: SyncRunSummary) -> None:
        self.run_history.append(summary)
        if len(self.run_history) > HISTORY_LIMIT:
            del self.run_history[: len(self.run_history) - HISTORY_LIMIT]

    def enable(self, now: datetime | None = None) -> None:
        if self.is_enabled:
            return
        self.schedule = self.schedule.with_enabled(True)
        self._reschedule(now or utc_now())
        self.mark_modified()

    def disable(self) -> None:
        self.schedule = self.schedule.with_enabled(False)
        self.next_run_at = None
        self.mark_modified()

    def update_schedule(self, schedule: SyncSchedule, now: datetime | None = None) -> None:
        self.schedule = schedule
        self._reschedule(now or utc_now())
        self.increment_version()
        self.mark_modified()

    def update_settings(
        self,
        name: str | None = None,
        description: str | None = None,
        conflict_resolution: ConflictResolution | None = None,
        batch_size: int | None = None,
    ) -> None:
        if name is not None:
            if not name.strip():
                raise ValidationError("Sync job name cannot be empty", field="name")
            self.name = name.strip()
        if description is not None:
            self.description = description.strip()
        if conflict_resolution is not None:
            self.conflict_resolution = ConflictResolution(conflict_resolution)
        if batch_size is not None:
            if not 1 <= batch_size <= self.max_batch_size:
                raise ValidationError(
                    f"Batch size must be between 1 and {self.max_batch_size}",
                    field="batch_size",
                )
            self.batch_size = batch_size
        self.mark_modified()

    def attach_mapping(self, mapping_id: UUID | None) -> None:
        self.mapping_id = mapping_id
        self.mark_modified()

    def needs_attention(self) -> bool:
        return self.status == SyncJobStatus.FAILED or self.retry_count >= max(
            self.max_retries, 1
        )

    def execution_statistics(self) -> dict[str, Any]:
        total = len(self.run_history)
        successful = sum(1 for run in self.run_history if run.success)
        return {
            "total_runs": total,
            "successful_runs": successful,
            "failed_runs": total - successful,
            "success_rate": (successful / total * 100) if total else 0.0,
            "average_records_processed": (
                sum(run.records_processed for run in self.run_history) / total
                if total
                else 0.0
            ),
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "owner_id": str(self.owner_id),
            "integration_id": str(self.integration_id),
            "mapping_id": str(self.mapping_id) if self.mapping_id else None,
            "name": self.name,
            "description": self.description,
            "direction": self.direction.value,
            "schedule": self.schedule.to_dict(),
            "conflict_resolution": self.conflict_resolution.value,
            "batch_size": self.batch_size,
            "key_field": self.key_field,
            "status": self.status.value,
            "retry_count": self.retry_count,
            "last_error": self.last_error,
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
            "next_run_at": self.next_run_at.isoformat() if self.next_run_at else None,
        }

    def __str__(self) -> str:
        return f"SyncJob({self.name}, {self.schedule})"
