"""Bulk operation DTOs for application layer."""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class BulkOperationResultDTO:
    """Per-item outcome of a bulk command."""

    action: str
    successful: list[UUID] = field(default_factory=list)
    failed: list[UUID] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "action": self.action,
            "summary": {"successful": len(self.successful), "failed": len(self.failed)},
            "successful": [str(item) for item in self.successful],
            "failed": [str(item) for item in self.failed],
            "errors": dict(self.errors),
        }
