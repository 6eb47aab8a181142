"""Delete integration command and handler."""

from typing import Any
from uuid import UUID

from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.errors import PreconditionFailedError, ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.services import load_owned_integration
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
    IIntegrationRepository,
    ISyncJobRepository,
)
from flowcreate.modules.integration.infrastructure.services import AggregateLockRegistry

logger = get_logger(__name__)


class DeleteIntegrationCommand(Command):
    """Command to delete an integration and its data mappings."""

    def __init__(self, integration_id: UUID, owner_id: UUID):
        super().__init__()
        self.integration_id = integration_id
        self.owner_id = owner_id
        self._freeze()

    def validate(self) -> None:
        if not self.integration_id or not self.owner_id:
            raise ValidationError("integration_id and owner_id are required")


class DeleteIntegrationCommandHandler(CommandHandler[DeleteIntegrationCommand, dict]):
    """Handler for deleting integrations.

    Refused while any sync job still runs over the integration. Data
    mappings of the integration are removed with it.
    """

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        mapping_repository: IDataMappingRepository,
        sync_job_repository: ISyncJobRepository,
        locks: AggregateLockRegistry,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._mapping_repository = mapping_repository
        self._sync_job_repository = sync_job_repository
        self._locks = locks

    async def handle(self, command: DeleteIntegrationCommand) -> CommandResult[dict[str, Any]]:
        async with self._locks.hold(command.integration_id):
            integration = await load_owned_integration(
                self._integration_repository, command.integration_id, command.owner_id
            )

            jobs = await self._sync_job_repository.get_by_integration(integration.id)
            if jobs:
                raise PreconditionFailedError(
                    "delete integration",
                    f"{len(jobs)} sync job(s) still reference it: "
                    + ", ".join(job.name for job in jobs),
                )

            mappings = await self._mapping_repository.get_by_integration(integration.id)
            for mapping in mappings:
                await self._mapping_repository.delete(mapping.id)
            await self._integration_repository.delete(integration.id)

        logger.info(
            "Integration deleted",
            integration_id=str(command.integration_id),
            mappings_deleted=len(mappings),
        )
        return CommandResult.success_result(
            {
                "integration_id": str(command.integration_id),
                "mappings_deleted": len(mappings),
            }
        )

    @property
    def command_type(self) -> type[DeleteIntegrationCommand]:
        return DeleteIntegrationCommand
