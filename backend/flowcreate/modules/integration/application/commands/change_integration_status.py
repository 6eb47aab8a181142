"""Integration lifecycle commands and handlers.

Covers activate, pause, resume and archive for a single integration, and
the bulk variant that applies one action to many integrations.
"""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.domain.base import utc_now
from flowcreate.core.errors import FlowCreateError, ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import (
    BulkOperationResultDTO,
    IntegrationDTO,
)
from flowcreate.modules.integration.application.services import load_owned_integration
from flowcreate.modules.integration.domain.aggregates import Integration
from flowcreate.modules.integration.domain.enums import StatusAction
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)
from flowcreate.modules.integration.infrastructure.services import AggregateLockRegistry

logger = get_logger(__name__)

MAX_BULK_ITEMS = 100


def apply_status_action(
    integration: Integration, action: StatusAction, now: datetime
) -> None:
    """
    Raises:
        InvalidStatusTransitionError: If the transition is not allowed
        ValidationError: If activation or resumption finds config problems
    """
    if action == StatusAction.ACTIVATE:
        integration.activate(now)
    elif action == StatusAction.PAUSE:
        integration.pause()
    elif action == StatusAction.RESUME:
        integration.resume(now)
    else:
        integration.archive()


class _IntegrationStatusCommand(Command):
    action: StatusAction

    def __init__(self, integration_id: UUID, owner_id: UUID):
        super().__init__()
        self.integration_id = integration_id
        self.owner_id = owner_id
        self._freeze()

    def validate(self) -> None:
        if not self.integration_id or not self.owner_id:
            raise ValidationError("integration_id and owner_id are required")


class ActivateIntegrationCommand(_IntegrationStatusCommand):
    """Move a draft integration to active."""

    action = StatusAction.ACTIVATE


class PauseIntegrationCommand(_IntegrationStatusCommand):
    """Pause an active integration."""

    action = StatusAction.PAUSE


class ResumeIntegrationCommand(_IntegrationStatusCommand):
    """Resume a paused integration."""

    action = StatusAction.RESUME


class ArchiveIntegrationCommand(_IntegrationStatusCommand):
    """Archive an integration permanently."""

    action = StatusAction.ARCHIVE


class _IntegrationStatusCommandHandler(
    CommandHandler[_IntegrationStatusCommand, IntegrationDTO]
):
    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        locks: AggregateLockRegistry,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._locks = locks
        self._clock = clock

    async def handle(self, command: _IntegrationStatusCommand) -> CommandResult[IntegrationDTO]:
        async with self._locks.hold(command.integration_id):
            integration = await load_owned_integration(
                self._integration_repository, command.integration_id, command.owner_id
            )
            previous = integration.status
            apply_status_action(integration, command.action, self._clock())
            await self._integration_repository.save(integration)

        logger.info(
            "Integration status changed",
            integration_id=str(integration.id),
            action=command.action.value,
            old_status=previous.value,
            new_status=integration.status.value,
        )
        return CommandResult.success_result(IntegrationDTO.from_domain(integration))


class ActivateIntegrationCommandHandler(_IntegrationStatusCommandHandler):
    """Handler for activating integrations."""

    @property
    def command_type(self) -> type[ActivateIntegrationCommand]:
        return ActivateIntegrationCommand


class PauseIntegrationCommandHandler(_IntegrationStatusCommandHandler):
    """Handler for pausing integrations."""

    @property
    def command_type(self) -> type[PauseIntegrationCommand]:
        return PauseIntegrationCommand


class ResumeIntegrationCommandHandler(_IntegrationStatusCommandHandler):
    """Handler for resuming integrations."""

    @property
    def command_type(self) -> type[ResumeIntegrationCommand]:
        return ResumeIntegrationCommand


class ArchiveIntegrationCommandHandler(_IntegrationStatusCommandHandler):
    """Handler for archiving integrations."""

    @property
    def command_type(self) -> type[ArchiveIntegrationCommand]:
        return ArchiveIntegrationCommand


class BulkChangeIntegrationStatusCommand(Command):
    """Apply one lifecycle action to several integrations."""

    def __init__(
        self,
        owner_id: UUID,
        integration_ids: list[UUID],
        action: StatusAction | str,
    ):
        super().__init__()
        self.owner_id = owner_id
        self.integration_ids = list(dict.fromkeys(integration_ids or []))
        self.action = action
        self._freeze()

    def validate(self) -> None:
        field_errors: dict[str, list[str]] = {}
        if not self.owner_id:
            field_errors["owner_id"] = ["owner_id is required"]
        if not self.integration_ids:
            field_errors["integration_ids"] = ["At least one integration id is required"]
        elif len(self.integration_ids) > MAX_BULK_ITEMS:
            field_errors["integration_ids"] = [
                f"Cannot process more than {MAX_BULK_ITEMS} integrations at once"
            ]
        try:
            StatusAction(self.action)
        except ValueError:
            allowed = ", ".join(a.value for a in StatusAction)
            field_errors["action"] = [
                f"Invalid action '{self.action}'. Must be one of: {allowed}"
            ]
        if field_errors:
            raise ValidationError.from_fields(field_errors)


class BulkChangeIntegrationStatusCommandHandler(
    CommandHandler[BulkChangeIntegrationStatusCommand, BulkOperationResultDTO]
):
    """Handler for bulk lifecycle changes.

    Each integration is processed independently; one failure does not stop
    the rest. The envelope fails only when every item failed.
    """

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        locks: AggregateLockRegistry,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._locks = locks
        self._clock = clock

    async def handle(
        self, command: BulkChangeIntegrationStatusCommand
    ) -> CommandResult[BulkOperationResultDTO]:
        action = StatusAction(command.action)
        successful: list[UUID] = []
        failed: list[UUID] = []
        errors: dict[str, str] = {}

        for integration_id in command.integration_ids:
            try:
                async with self._locks.hold(integration_id):
                    integration = await load_owned_integration(
                        self._integration_repository, integration_id, command.owner_id
                    )
                    apply_status_action(integration, action, self._clock())
                    await self._integration_repository.save(integration)
            except FlowCreateError as e:
                failed.append(integration_id)
                errors[str(integration_id)] = e.user_message
                continue
            successful.append(integration_id)

        result = BulkOperationResultDTO(
            action=action.value, successful=successful, failed=failed, errors=errors
        )
        logger.info(
            "Bulk status change processed",
            owner_id=str(command.owner_id),
            action=action.value,
            successful=len(successful),
            failed=len(failed),
        )

        if not successful:
            return CommandResult.failure_result(
                f"Failed to {action.value} all {len(failed)} integration(s)",
                error_code="BULK_OPERATION_FAILED",
                data=result,
            )
        warnings = [f"{integration_id}: {message}" for integration_id, message in errors.items()]
        return CommandResult.success_result(result, warnings=warnings)

    @property
    def command_type(self) -> type[BulkChangeIntegrationStatusCommand]:
        return BulkChangeIntegrationStatusCommand
