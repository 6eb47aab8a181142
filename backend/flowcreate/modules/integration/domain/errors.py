"""Integration domain errors.

Expected failure modes (validation, precondition, transformation) are raised
inside aggregates and caught by the domain services, which turn them into
result objects. Transport failures are raised by the transport collaborator.
"""

from typing import Any
from uuid import UUID

from flowcreate.core.errors import (
    DomainError,
    ErrorSeverity,
    InfrastructureError,
    NotFoundError,
    PreconditionFailedError,
)


class IntegrationError(DomainError):
    """Base error for integration domain."""

    default_code = "INTEGRATION_ERROR"


class IntegrationNotFoundError(NotFoundError):
    """Raised when an integration cannot be found."""

    default_code = "INTEGRATION_NOT_FOUND"

    def __init__(self, integration_id: UUID, **kwargs: Any):
        super().__init__(
            "Integration",
            integration_id,
            recovery_hint="Please check the integration ID and try again",
            **kwargs,
        )
        self.integration_id = integration_id
        self.code = self.default_code


class InvalidStatusTransitionError(PreconditionFailedError):
    """Raised when a lifecycle transition is not allowed from the current status."""

    default_code = "INVALID_STATUS_TRANSITION"

    def __init__(self, action: str, current_status: Any, **kwargs: Any):
        super().__init__(
            f"{action} integration",
            f"transition not allowed from status '{current_status}'",
            **kwargs,
        )
        self.details["current_status"] = str(current_status)
        self.code = self.default_code


class TransportError(InfrastructureError):
    """
    Wraps network, HTTP and timeout failures from the transport collaborator.

    ``response_status`` holds the remote HTTP status when one was received.
    """

    default_code = "TRANSPORT_ERROR"
    status_code = 502
    severity = ErrorSeverity.MEDIUM
    retryable = True

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        response_status: int | None = None,
        timed_out: bool = False,
        **kwargs: Any,
    ):
        super().__init__(
            message,
            user_message=message,
            recovery_hint="Please check your connection settings and try again",
            **kwargs,
        )
        self.endpoint = endpoint
        self.response_status = response_status
        self.timed_out = timed_out
        self.details.update(
            {
                "endpoint": endpoint,
                "response_status": response_status,
                "timed_out": timed_out,
            }
        )
        if timed_out:
            self.code = "TRANSPORT_TIMEOUT"


class TransformationError(IntegrationError):
    """Field-scoped failure produced while transforming a payload."""

    default_code = "TRANSFORMATION_ERROR"
    status_code = 422
    severity = ErrorSeverity.LOW

    def __init__(self, field_errors: list[Any], **kwargs: Any):
        self.field_errors = list(field_errors)
        summary = "; ".join(str(error) for error in self.field_errors) or "unknown error"
        message = f"Transformation failed: {summary}"
        super().__init__(message, user_message=message, **kwargs)
        self.details["field_errors"] = [
            error.to_dict() if hasattr(error, "to_dict") else str(error)
            for error in self.field_errors
        ]


class ExpressionError(IntegrationError):
    """Raised when a mapping expression is malformed or cannot be evaluated."""

    default_code = "EXPRESSION_ERROR"
    status_code = 422
    severity = ErrorSeverity.LOW

    def __init__(self, expression: str, reason: str, **kwargs: Any):
        message = f"Invalid expression '{expression}': {reason}"
        super().__init__(message, user_message=message, **kwargs)
        self.expression = expression
        self.reason = reason
        self.details.update({"expression": expression, "reason": reason})
