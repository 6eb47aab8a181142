"""Integration lifecycle and execution events."""

from uuid import UUID

from flowcreate.core.domain.base import DomainEvent
from flowcreate.modules.integration.domain.enums import IntegrationStatus, IntegrationType


class IntegrationCreated(DomainEvent):
    """Raised when an integration is registered in draft status."""

    def __init__(
        self,
        integration_id: UUID,
        owner_id: UUID,
        name: str,
        integration_type: IntegrationType,
    ):
        super().__init__()
        self.integration_id = integration_id
        self.owner_id = owner_id
        self.name = name
        self.integration_type = integration_type

    def __str__(self) -> str:
        return f"Integration {self.name} ({self.integration_id}) created"


class IntegrationStatusChanged(DomainEvent):
    """Raised on every lifecycle transition."""

    def __init__(
        self,
        integration_id: UUID,
        old_status: IntegrationStatus,
        new_status: IntegrationStatus,
    ):
        super().__init__()
        self.integration_id = integration_id
        self.old_status = old_status
        self.new_status = new_status

    def __str__(self) -> str:
        return (
            f"Integration {self.integration_id} moved from "
            f"{self.old_status.value} to {self.new_status.value}"
        )


class IntegrationExecuted(DomainEvent):
    """Raised each time an execution outcome is recorded."""

    def __init__(
        self,
        integration_id: UUID,
        success: bool,
        duration_ms: float,
        error_message: str | None = None,
    ):
        super().__init__()
        self.integration_id = integration_id
        self.success = success
        self.duration_ms = duration_ms
        self.error_message = error_message

    def __str__(self) -> str:
        state = "succeeded" if self.success else "failed"
        return f"Integration {self.integration_id} execution {state}"


class IntegrationCredentialsRefreshed(DomainEvent):
    """Raised when an integration's credential is replaced."""

    def __init__(self, integration_id: UUID):
        super().__init__()
        self.integration_id = integration_id

    def __str__(self) -> str:
        return f"Integration {self.integration_id} credentials refreshed"
