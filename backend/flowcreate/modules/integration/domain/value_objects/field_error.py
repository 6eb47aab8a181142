"""Field-scoped error value object."""

from dataclasses import dataclass
from typing import Any

from flowcreate.core.domain.base import ValueObject

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class FieldError(ValueObject):
    """One problem attached to one field, so callers can report many at once."""

    field: str
    message: str
    severity: str = ERROR

    @property
    def is_error(self) -> bool:
        return self.severity == ERROR

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "message": self.message, "severity": self.severity}

    def __str__(self) -> str:
        return f"{self.field}: {self.message}" if self.field else self.message
