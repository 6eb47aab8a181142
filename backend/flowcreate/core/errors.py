"""Error classes shared by every FlowCreate layer."""

import logging
import time
import uuid
from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """Error severity levels for monitoring and alerting."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class FlowCreateError(Exception):
    """
    Base exception for all FlowCreate errors.

    Carries an error id, a stable code, a severity level and a retry hint so
    handlers can turn any failure into a result envelope without inspecting
    the concrete class.
    """

    default_code: str = "ERROR"
    status_code: int = 500
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    retryable: bool = False

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message
        self.code = kwargs.get("code") or self.default_code
        self.details = kwargs.get("details") or {}
        self.error_id = str(uuid.uuid4())
        self.timestamp = time.time()
        self.user_message = kwargs.get("user_message") or message
        self.recovery_hint = kwargs.get("recovery_hint")
        self.context = kwargs.get("context") or {}
        self.__cause__ = kwargs.get("cause")

        self._log_error()

    def _log_error(self) -> None:
        """Log error with structured data."""
        logger = logging.getLogger(f"flowcreate.errors.{self.__class__.__name__}")
        log_data = {
            "error_id": self.error_id,
            "code": self.code,
            "error_message": self.message,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "details": self._sanitize(self.details),
            "context": self._sanitize(self.context),
            "error_class": self.__class__.__name__,
        }

        if self.severity == ErrorSeverity.CRITICAL:
            logger.critical("Critical error occurred", extra=log_data)
        elif self.severity == ErrorSeverity.HIGH:
            logger.error("High severity error", extra=log_data)
        elif self.severity == ErrorSeverity.MEDIUM:
            logger.warning("Medium severity error", extra=log_data)
        else:
            logger.info("Low severity error", extra=log_data)

    def _sanitize(self, details: dict) -> dict:
        """Remove sensitive values before they reach a log sink."""
        if not details:
            return {}

        sensitive_keys = {"password", "token", "secret", "credential", "authorization"}
        sanitized = {}

        for key, value in details.items():
            if any(sensitive in key.lower() for sensitive in sensitive_keys):
                sanitized[key] = "***REDACTED***"
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize(value)
            else:
                sanitized[key] = value

        return sanitized

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        """Serialize error for API responses and logs."""
        data = {
            "error": self.code,
            "message": self.user_message,
            "timestamp": self.timestamp,
        }

        if include_details and self.details:
            data["details"] = {
                k: v for k, v in self._sanitize(self.details).items()
                if not k.startswith("_")
            }

        if self.recovery_hint:
            data["recovery_hint"] = self.recovery_hint

        if self.retryable:
            data["retryable"] = True

        return data

    def __str__(self) -> str:
        return f"[{self.error_id}] {self.code}: {self.message}"


class DomainError(FlowCreateError):
    """Base class for domain errors."""

    default_code = "DOMAIN_ERROR"
    status_code = 400
    severity = ErrorSeverity.MEDIUM


class ApplicationError(FlowCreateError):
    """Base class for application layer errors."""

    default_code = "APPLICATION_ERROR"
    status_code = 400
    severity = ErrorSeverity.MEDIUM


class InfrastructureError(FlowCreateError):
    """Base class for infrastructure errors."""

    default_code = "INFRASTRUCTURE_ERROR"
    status_code = 500
    severity = ErrorSeverity.HIGH
    retryable = True


class ValidationError(DomainError):
    """Validation error with support for multiple field errors."""

    default_code = "VALIDATION_ERROR"
    status_code = 422
    severity = ErrorSeverity.LOW

    def __init__(
        self,
        message: str,
        field: str | None = None,
        field_errors: dict[str, list[str]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.field_errors: dict[str, list[str]] = dict(field_errors or {})
        if field:
            self.details["field"] = field
            self.field_errors.setdefault(field, [message])
        if self.field_errors:
            self.details["field_errors"] = self.field_errors
        self.code = self.default_code

    @property
    def reasons(self) -> list[str]:
        """Flattened list of every field reason, in insertion order."""
        if not self.field_errors:
            return [self.message]
        return [
            reason
            for reasons in self.field_errors.values()
            for reason in reasons
        ]

    @classmethod
    def from_fields(
        cls, field_errors: dict[str, list[str]], **kwargs: Any
    ) -> "ValidationError":
        """Create validation error from field errors dictionary."""
        total_errors = sum(len(errors) for errors in field_errors.values())
        message = (
            f"Validation failed for {len(field_errors)} field(s) "
            f"with {total_errors} error(s): "
            + "; ".join(
                reason for reasons in field_errors.values() for reason in reasons
            )
        )
        return cls(message, field_errors=field_errors, **kwargs)


class PreconditionFailedError(DomainError):
    """Aggregate is not in a state that permits the requested operation."""

    default_code = "PRECONDITION_FAILED"
    status_code = 409
    severity = ErrorSeverity.LOW

    def __init__(self, operation: str, reason: str, **kwargs: Any) -> None:
        message = f"Cannot {operation}: {reason}"
        kwargs.setdefault("user_message", message)
        super().__init__(message, **kwargs)
        self.details.update({"operation": operation, "reason": reason})
        self.code = self.default_code


class NotFoundError(ApplicationError):
    """Resource not found error."""

    default_code = "NOT_FOUND"
    status_code = 404
    severity = ErrorSeverity.LOW

    def __init__(self, resource: str, identifier: Any, **kwargs: Any) -> None:
        message = f"{resource} not found: {identifier}"
        user_message = f"The requested {resource.lower()} was not found"
        super().__init__(message, user_message=user_message, **kwargs)
        self.details.update({"resource": resource, "identifier": str(identifier)})
        self.code = self.default_code


class UnauthorizedError(ApplicationError):
    """Acting user does not own the aggregate."""

    default_code = "UNAUTHORIZED"
    status_code = 403
    severity = ErrorSeverity.MEDIUM

    def __init__(self, message: str = "Access denied", **kwargs: Any) -> None:
        user_message = "You don't have permission to access this resource"
        super().__init__(message, user_message=user_message, **kwargs)
        self.code = self.default_code


class ConfigurationError(InfrastructureError):
    """Configuration error."""

    default_code = "CONFIGURATION_ERROR"
    status_code = 500
    severity = ErrorSeverity.CRITICAL
    retryable = False

    def __init__(
        self, message: str, config_key: str | None = None, **kwargs: Any
    ) -> None:
        user_message = "Service configuration issue"
        super().__init__(message, user_message=user_message, **kwargs)
        if config_key:
            self.details["config_key"] = config_key
        self.code = self.default_code


__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "DomainError",
    "ErrorSeverity",
    "FlowCreateError",
    "InfrastructureError",
    "NotFoundError",
    "PreconditionFailedError",
    "UnauthorizedError",
    "ValidationError",
]
