"""Summary of one sync job run."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from flowcreate.core.domain.base import ValueObject
from flowcreate.modules.integration.domain.value_objects.field_error import FieldError


@dataclass(frozen=True)
class SyncRunSummary(ValueObject):
    """Per-record outcome counters of a sync run.

    A bad record is counted in ``failed`` and described in ``errors``; it
    never aborts the rest of the batch.
    """

    started_at: datetime
    finished_at: datetime
    records_processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    conflicts: int = 0
    deferred: int = 0
    errors: tuple[FieldError, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return self.failed == 0

    @property
    def duration_ms(self) -> float:
        return (self.finished_at - self.started_at).total_seconds() * 1000

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "records_processed": self.records_processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "conflicts": self.conflicts,
            "deferred": self.deferred,
            "errors": [error.to_dict() for error in self.errors],
            "summary": {"successful": self.succeeded, "failed": self.failed},
        }

    def __str__(self) -> str:
        return f"{self.succeeded}/{self.records_processed} records synced"
