"""Transient results of integration executions."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from flowcreate.core.domain.base import ValueObject
from flowcreate.modules.integration.domain.enums import ExecutionErrorKind


@dataclass(frozen=True)
class ExecutionError(ValueObject):
    """One categorized failure observed during an execution."""

    kind: ExecutionErrorKind
    message: str
    step: str = "execute"
    endpoint: str | None = None

    @property
    def recoverable(self) -> bool:
        return self.kind.is_recoverable

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "step": self.step,
            "endpoint": self.endpoint,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        return f"[{self.kind}] {self.message}"


@dataclass(frozen=True)
class ExecutionMetrics(ValueObject):
    """Timing and volume figures of one execution."""

    network_time_ms: float = 0.0
    transformation_time_ms: float = 0.0
    validation_time_ms: float = 0.0
    bytes_transferred: int = 0
    records_processed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "network_time_ms": round(self.network_time_ms, 3),
            "transformation_time_ms": round(self.transformation_time_ms, 3),
            "validation_time_ms": round(self.validation_time_ms, 3),
            "bytes_transferred": self.bytes_transferred,
            "records_processed": self.records_processed,
        }

    def __str__(self) -> str:
        return f"network={self.network_time_ms:.1f}ms transform={self.transformation_time_ms:.1f}ms"


@dataclass(frozen=True)
class ExecutionResult(ValueObject):
    """Outcome of executing an integration once. Not persisted."""

    execution_id: str
    success: bool
    started_at: datetime
    finished_at: datetime
    duration_ms: float
    requests_count: int = 0
    response_data: Any = None
    transformed_data: Any = None
    errors: tuple[ExecutionError, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)
    metrics: ExecutionMetrics = field(default_factory=ExecutionMetrics)

    @property
    def error_message(self) -> str | None:
        if not self.errors:
            return None if self.success else "Execution failed"
        return "; ".join(error.message for error in self.errors)

    @property
    def error_kind(self) -> ExecutionErrorKind | None:
        return self.errors[0].kind if self.errors else None

    @property
    def recoverable(self) -> bool:
        return bool(self.errors) and all(error.recoverable for error in self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "execution_id": self.execution_id,
            "success": self.success,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration_ms": round(self.duration_ms, 3),
            "requests_count": self.requests_count,
            "response_data": self.response_data,
            "transformed_data": self.transformed_data,
            "error_message": self.error_message,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": list(self.warnings),
            "metrics": self.metrics.to_dict(),
        }

    def __str__(self) -> str:
        state = "succeeded" if self.success else "failed"
        return f"execution {self.execution_id} {state} in {self.duration_ms:.1f}ms"


@dataclass(frozen=True)
class ConnectionTestResult(ValueObject):
    """Outcome of a lightweight connectivity probe."""

    success: bool
    response_time_ms: float
    status_code: int | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "response_time_ms": round(self.response_time_ms, 3),
            "status_code": self.status_code,
            "error_message": self.error_message,
        }

    def __str__(self) -> str:
        return f"connection {'ok' if self.success else 'failed'} ({self.status_code})"
