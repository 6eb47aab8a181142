"""Create sync job command and handler."""

from collections.abc import Callable
from datetime import datetime
from typing import Any
from uuid import UUID

from flowcreate.core.config import EngineConfig
from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.domain.base import utc_now
from flowcreate.core.errors import PreconditionFailedError, ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import SyncJobDTO
from flowcreate.modules.integration.application.services import (
    build_schedule,
    build_schema,
    load_owned_integration,
    load_owned_mapping,
)
from flowcreate.modules.integration.domain.aggregates import SyncJob
from flowcreate.modules.integration.domain.enums import ConflictResolution, SyncDirection
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
    IIntegrationRepository,
    ISyncJobRepository,
)
from flowcreate.modules.integration.domain.value_objects import DataSchema, SyncSchedule

logger = get_logger(__name__)


class CreateSyncJobCommand(Command):
    """Command to schedule recurring synchronization over an integration."""

    def __init__(
        self,
        owner_id: UUID,
        integration_id: UUID,
        name: str,
        direction: SyncDirection | str,
        schedule: SyncSchedule | dict[str, Any],
        conflict_resolution: ConflictResolution | str = ConflictResolution.SOURCE_WINS,
        batch_size: int = 100,
        description: str | None = None,
        source_schema: DataSchema | dict[str, Any] | None = None,
        target_schema: DataSchema | dict[str, Any] | None = None,
        mapping_id: UUID | None = None,
        key_field: str = "id",
        max_retries: int = 3,
    ):
        """Initialize create sync job command.

        Args:
            owner_id: User creating the job
            integration_id: Integration the job runs over
            name: Job name
            direction: pull, push or bidirectional
            schedule: Interval or cron schedule
            conflict_resolution: Policy for records that already exist at the target
            batch_size: Records processed per run
            description: Optional description
            source_schema: Optional shape of source records
            target_schema: Optional shape records are validated against
            mapping_id: Optional data mapping applied to every record
            key_field: Record field identifying target records
            max_retries: Retries scheduled after a failed run
        """
        super().__init__()
        self.owner_id = owner_id
        self.integration_id = integration_id
        self.name = name
        self.direction = direction
        self.schedule = schedule
        self.conflict_resolution = conflict_resolution
        self.batch_size = batch_size
        self.description = description
        self.source_schema = source_schema
        self.target_schema = target_schema
        self.mapping_id = mapping_id
        self.key_field = key_field
        self.max_retries = max_retries
        self._freeze()

    def validate(self) -> None:
        field_errors: dict[str, list[str]] = {}
        if not self.owner_id:
            field_errors["owner_id"] = ["owner_id is required"]
        if not self.integration_id:
            field_errors["integration_id"] = ["integration_id is required"]
        if not self.name or not self.name.strip():
            field_errors["name"] = ["Sync job name is required"]
        try:
            SyncDirection(self.direction)
        except ValueError:
            field_errors["direction"] = ["Direction must be pull, push or bidirectional"]
        try:
            ConflictResolution(self.conflict_resolution)
        except ValueError:
            field_errors["conflict_resolution"] = [
                "Conflict resolution must be source_wins, target_wins or merge"
            ]
        if self.schedule is None:
            field_errors["schedule"] = ["Schedule is required"]
        if field_errors:
            raise ValidationError.from_fields(field_errors)


class CreateSyncJobCommandHandler(CommandHandler[CreateSyncJobCommand, SyncJobDTO]):
    """Handler for creating sync jobs."""

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        mapping_repository: IDataMappingRepository,
        sync_job_repository: ISyncJobRepository,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._mapping_repository = mapping_repository
        self._sync_job_repository = sync_job_repository
        self._config = config or EngineConfig()
        self._clock = clock

    async def handle(self, command: CreateSyncJobCommand) -> CommandResult[SyncJobDTO]:
        """Handle create sync job command.

        Raises:
            NotFoundError: If the integration or mapping does not exist
            PreconditionFailedError: If the integration cannot be synced
            ValidationError: If the schedule, schemas or settings are invalid
        """
        integration = await load_owned_integration(
            self._integration_repository, command.integration_id, command.owner_id
        )
        if not integration.integration_type.supports_sync:
            raise PreconditionFailedError(
                "create sync job",
                f"{integration.integration_type} integrations do not support synchronization",
            )
        if integration.is_archived:
            raise PreconditionFailedError("create sync job", "integration is archived")

        target_schema = (
            build_schema(command.target_schema, "target_schema")
            if command.target_schema is not None
            else None
        )
        if command.mapping_id is not None:
            mapping = await load_owned_mapping(
                self._mapping_repository, command.mapping_id, command.owner_id
            )
            if mapping.integration_id != integration.id:
                raise ValidationError(
                    "Data mapping belongs to another integration", field="mapping_id"
                )
            target_schema = target_schema or mapping.target_schema

        job = SyncJob(
            owner_id=command.owner_id,
            integration_id=integration.id,
            name=command.name,
            direction=command.direction,
            schedule=build_schedule(command.schedule),
            conflict_resolution=command.conflict_resolution,
            batch_size=command.batch_size,
            description=command.description,
            source_schema=(
                build_schema(command.source_schema, "source_schema")
                if command.source_schema is not None
                else None
            ),
            target_schema=target_schema,
            mapping_id=command.mapping_id,
            key_field=command.key_field,
            max_retries=command.max_retries,
            max_batch_size=self._config.sync_max_batch_size,
            now=self._clock(),
        )
        await self._sync_job_repository.save(job)

        logger.info(
            "Sync job created",
            job_id=str(job.id),
            integration_id=str(integration.id),
            direction=job.direction.value,
            schedule=str(job.schedule),
        )
        return CommandResult.success_result(SyncJobDTO.from_domain(job))

    @property
    def command_type(self) -> type[CreateSyncJobCommand]:
        return CreateSyncJobCommand
