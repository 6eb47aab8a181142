"""Sync schedule value object."""

from datetime import datetime, timedelta
from typing import Any

from croniter import croniter

from flowcreate.core.domain.base import ValueObject
from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.domain.enums import ScheduleType

MIN_INTERVAL_MS = 60_000
CRON_PARTS = (5, 6)


class SyncSchedule(ValueObject):
    """When a sync job runs: a fixed interval or a cron expression."""

    def __init__(
        self,
        schedule_type: ScheduleType | str,
        interval_ms: int | None = None,
        cron_expression: str | None = None,
        enabled: bool = True,
    ):
        super().__init__()
        if not isinstance(schedule_type, ScheduleType):
            try:
                schedule_type = ScheduleType(schedule_type)
            except ValueError as e:
                raise ValidationError(
                    f"Invalid schedule type '{schedule_type}'. Must be interval or cron",
                    field="schedule.type",
                ) from e

        if schedule_type == ScheduleType.INTERVAL:
            if not isinstance(interval_ms, int) or interval_ms < MIN_INTERVAL_MS:
                raise ValidationError(
                    f"Interval schedules need interval_ms of at least {MIN_INTERVAL_MS}",
                    field="schedule.interval_ms",
                )
            cron_expression = None
        else:
            if not cron_expression or not self._is_valid_cron(cron_expression):
                raise ValidationError(
                    f"Invalid cron expression: {cron_expression}",
                    field="schedule.cron_expression",
                )
            cron_expression = " ".join(cron_expression.split())
            interval_ms = None

        self.schedule_type = schedule_type
        self.interval_ms = interval_ms
        self.cron_expression = cron_expression
        self.enabled = bool(enabled)
        self._freeze()

    @staticmethod
    def _is_valid_cron(expression: str) -> bool:
        if len(expression.split()) not in CRON_PARTS:
            return False
        try:
            croniter(expression)
        except (ValueError, TypeError, KeyError):
            return False
        return True

    @classmethod
    def every(cls, interval: timedelta, enabled: bool = True) -> "SyncSchedule":
        return cls(
            ScheduleType.INTERVAL,
            interval_ms=int(interval.total_seconds() * 1000),
            enabled=enabled,
        )

    @classmethod
    def cron(cls, expression: str, enabled: bool = True) -> "SyncSchedule":
        return cls(ScheduleType.CRON, cron_expression=expression, enabled=enabled)

    def next_run_after(self, last_run_at: datetime | None, now: datetime) -> datetime:
        """Compute the next run instant.

        Interval schedules run ``interval_ms`` after the last run, or at
        ``now`` when the job never ran. Cron schedules run at the first match
        strictly after the last run (or after ``now`` when never run).
        """
        if self.schedule_type == ScheduleType.INTERVAL:
            if last_run_at is None:
                return now
            return last_run_at + timedelta(milliseconds=self.interval_ms)

        base = last_run_at or now
        return croniter(self.cron_expression, base).get_next(datetime)

    def with_enabled(self, enabled: bool) -> "SyncSchedule":
        return SyncSchedule(
            self.schedule_type, self.interval_ms, self.cron_expression, enabled
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.schedule_type.value,
            "interval_ms": self.interval_ms,
            "cron_expression": self.cron_expression,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncSchedule":
        return cls(
            schedule_type=data.get("type", ""),
            interval_ms=data.get("interval_ms"),
            cron_expression=data.get("cron_expression"),
            enabled=data.get("enabled", True),
        )

    def __str__(self) -> str:
        if self.schedule_type == ScheduleType.INTERVAL:
            return f"every {self.interval_ms // 1000}s"
        return f"cron '{self.cron_expression}'"
