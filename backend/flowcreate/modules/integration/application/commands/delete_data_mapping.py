"""Delete data mapping command and handler."""

from typing import Any
from uuid import UUID

from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.errors import PreconditionFailedError, ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.services import load_owned_mapping
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
    ISyncJobRepository,
)
from flowcreate.modules.integration.infrastructure.services import AggregateLockRegistry

logger = get_logger(__name__)


class DeleteDataMappingCommand(Command):
    """Command to delete a data mapping."""

    def __init__(self, mapping_id: UUID, owner_id: UUID):
        super().__init__()
        self.mapping_id = mapping_id
        self.owner_id = owner_id
        self._freeze()

    def validate(self) -> None:
        if not self.mapping_id or not self.owner_id:
            raise ValidationError("mapping_id and owner_id are required")


class DeleteDataMappingCommandHandler(CommandHandler[DeleteDataMappingCommand, dict]):
    """Handler for deleting data mappings.

    Refused while an enabled sync job uses the mapping. Disabled jobs that
    use it are detached and keep syncing records untransformed once
    re-enabled.
    """

    def __init__(
        self,
        mapping_repository: IDataMappingRepository,
        sync_job_repository: ISyncJobRepository,
        locks: AggregateLockRegistry,
    ):
        super().__init__()
        self._mapping_repository = mapping_repository
        self._sync_job_repository = sync_job_repository
        self._locks = locks

    async def handle(self, command: DeleteDataMappingCommand) -> CommandResult[dict[str, Any]]:
        async with self._locks.hold(command.mapping_id):
            mapping = await load_owned_mapping(
                self._mapping_repository, command.mapping_id, command.owner_id
            )

            jobs = await self._sync_job_repository.get_by_mapping(mapping.id)
            enabled = [job for job in jobs if job.is_enabled]
            if enabled:
                raise PreconditionFailedError(
                    "delete data mapping",
                    "enabled sync job(s) use it: " + ", ".join(job.name for job in enabled),
                )

            detached = 0
            for listed in jobs:
                async with self._locks.hold(listed.id):
                    job = await self._sync_job_repository.get_by_id(listed.id)
                    if job is None or job.mapping_id != mapping.id:
                        continue
                    if job.is_enabled:
                        raise PreconditionFailedError(
                            "delete data mapping",
                            f"enabled sync job(s) use it: {job.name}",
                        )
                    job.attach_mapping(None)
                    await self._sync_job_repository.save(job)
                    detached += 1

            await self._mapping_repository.delete(mapping.id)

        logger.info(
            "Data mapping deleted",
            mapping_id=str(command.mapping_id),
            detached_jobs=detached,
        )
        return CommandResult.success_result(
            {"mapping_id": str(command.mapping_id), "detached_jobs": detached}
        )

    @property
    def command_type(self) -> type[DeleteDataMappingCommand]:
        return DeleteDataMappingCommand
