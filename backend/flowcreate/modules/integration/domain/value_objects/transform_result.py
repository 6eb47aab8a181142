"""Results produced by the data transformation service."""

from dataclasses import dataclass, field
from typing import Any

from flowcreate.core.domain.base import ValueObject
from flowcreate.modules.integration.domain.value_objects.field_error import FieldError


@dataclass(frozen=True)
class TransformStatistics(ValueObject):
    """Per-field counters of one transformation."""

    fields_mapped: int = 0
    fields_skipped: int = 0
    fields_defaulted: int = 0
    fields_errored: int = 0

    @property
    def fields_processed(self) -> int:
        return (
            self.fields_mapped
            + self.fields_skipped
            + self.fields_defaulted
            + self.fields_errored
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "fields_mapped": self.fields_mapped,
            "fields_skipped": self.fields_skipped,
            "fields_defaulted": self.fields_defaulted,
            "fields_errored": self.fields_errored,
        }

    def __str__(self) -> str:
        return (
            f"mapped={self.fields_mapped} skipped={self.fields_skipped} "
            f"defaulted={self.fields_defaulted} errored={self.fields_errored}"
        )


@dataclass(frozen=True)
class TransformResult(ValueObject):
    """Outcome of transforming one record.

    ``transformed_data`` is None whenever ``success`` is False; a partially
    transformed record is never returned.
    """

    success: bool
    is_valid: bool
    transformed_data: dict[str, Any] | None = None
    errors: tuple[FieldError, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)
    statistics: TransformStatistics = field(default_factory=TransformStatistics)

    @property
    def error_messages(self) -> list[str]:
        return [str(error) for error in self.errors]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "is_valid": self.is_valid,
            "transformed_data": self.transformed_data,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": list(self.warnings),
            "statistics": self.statistics.to_dict(),
        }

    def __str__(self) -> str:
        return "success" if self.success else "; ".join(self.error_messages)
