"""Enable or disable a sync job's schedule."""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.domain.base import utc_now
from flowcreate.core.errors import PreconditionFailedError, ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import SyncJobDTO
from flowcreate.modules.integration.application.services import load_owned_sync_job
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
    ISyncJobRepository,
)
from flowcreate.modules.integration.infrastructure.services import AggregateLockRegistry

logger = get_logger(__name__)


class SetSyncJobEnabledCommand(Command):
    def __init__(self, job_id: UUID, owner_id: UUID, enabled: bool):
        super().__init__()
        self.job_id = job_id
        self.owner_id = owner_id
        self.enabled = enabled
        self._freeze()

    def validate(self) -> None:
        if not self.job_id or not self.owner_id:
            raise ValidationError("job_id and owner_id are required")
        if not isinstance(self.enabled, bool):
            raise ValidationError("enabled must be a boolean", field="enabled")


class SetSyncJobEnabledCommandHandler(CommandHandler[SetSyncJobEnabledCommand, SyncJobDTO]):
    """Handler toggling a sync job's schedule.

    Enabling recomputes ``next_run_at``; disabling clears it. A job over an
    archived or deleted integration cannot be enabled.
    """

    def __init__(
        self,
        sync_job_repository: ISyncJobRepository,
        integration_repository: IIntegrationRepository,
        locks: AggregateLockRegistry,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__()
        self._sync_job_repository = sync_job_repository
        self._integration_repository = integration_repository
        self._locks = locks
        self._clock = clock

    async def handle(self, command: SetSyncJobEnabledCommand) -> CommandResult[SyncJobDTO]:
        async with self._locks.hold(command.job_id):
            job = await load_owned_sync_job(
                self._sync_job_repository, command.job_id, command.owner_id
            )

            if command.enabled:
                integration = await self._integration_repository.get_by_id(
                    job.integration_id
                )
                if integration is None or integration.is_archived:
                    raise PreconditionFailedError(
                        "enable sync job", "its integration is archived or deleted"
                    )
                job.enable(self._clock())
            else:
                job.disable()

            await self._sync_job_repository.save(job)

        logger.info(
            "Sync job schedule toggled",
            job_id=str(job.id),
            enabled=job.is_enabled,
            next_run_at=job.next_run_at.isoformat() if job.next_run_at else None,
        )
        return CommandResult.success_result(SyncJobDTO.from_domain(job))

    @property
    def command_type(self) -> type[SetSyncJobEnabledCommand]:
        return SetSyncJobEnabledCommand
