"""Readiness and mapping validation results."""

from dataclasses import dataclass, field
from typing import Any

from flowcreate.core.domain.base import ValueObject


@dataclass(frozen=True)
class IntegrationValidationResult(ValueObject):
    """Outcome of an integration readiness check.

    ``is_valid`` covers configuration (endpoints, credential, rate limits).
    ``can_execute`` additionally requires the integration to be active.
    ``errors`` lists every problem found, including the status problem.
    """

    is_valid: bool
    can_execute: bool
    errors: tuple[str, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "can_execute": self.can_execute,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }

    def __str__(self) -> str:
        return "ready" if self.can_execute else "; ".join(self.errors) or "not ready"


@dataclass(frozen=True)
class MappingValidationResult(ValueObject):
    """Outcome of validating a data mapping's rules against its schemas."""

    is_valid: bool
    errors: tuple[str, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }

    def __str__(self) -> str:
        return "valid" if self.is_valid else "; ".join(self.errors)
