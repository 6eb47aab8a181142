"""Run sync job command and handler."""

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any
from uuid import UUID

from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.domain.base import utc_now
from flowcreate.core.errors import (
    FlowCreateError,
    NotFoundError,
    PreconditionFailedError,
    ValidationError,
)
from flowcreate.core.logging import bound_log_context, get_logger
from flowcreate.modules.integration.application.dto import SyncJobDTO, SyncRunDTO
from flowcreate.modules.integration.application.services import (
    load_owned_integration,
    load_owned_sync_job,
)
from flowcreate.modules.integration.domain.aggregates import DataMapping, SyncJob
from flowcreate.modules.integration.domain.enums import (
    ExecutionErrorKind,
    ExecutionTrigger,
)
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
    IIntegrationRepository,
    ISyncJobRepository,
)
from flowcreate.modules.integration.domain.interfaces.services import ISyncTargetStore
from flowcreate.modules.integration.domain.services import (
    ExecutionContext,
    IntegrationExecutionService,
    SyncJobRunner,
)
from flowcreate.modules.integration.infrastructure.services import AggregateLockRegistry

logger = get_logger(__name__)


class RunSyncJobCommand(Command):
    """Command to run a sync job now.

    When ``records`` is None the records are pulled by executing the job's
    integration and reading its response.
    """

    def __init__(
        self,
        job_id: UUID,
        owner_id: UUID,
        records: Sequence[Any] | None = None,
        lookup_tables: dict[str, dict[str, Any]] | None = None,
    ):
        super().__init__()
        self.job_id = job_id
        self.owner_id = owner_id
        self.records = list(records) if records is not None else None
        self.lookup_tables = dict(lookup_tables or {})
        self._freeze()

    def validate(self) -> None:
        if not self.job_id or not self.owner_id:
            raise ValidationError("job_id and owner_id are required")


class RunSyncJobCommandHandler(CommandHandler[RunSyncJobCommand, SyncRunDTO]):
    """Handler for running sync jobs.

    The job lock is held for the whole run. Pulling from the integration
    additionally takes the integration lock for the duration of the call.
    """

    def __init__(
        self,
        sync_job_repository: ISyncJobRepository,
        integration_repository: IIntegrationRepository,
        mapping_repository: IDataMappingRepository,
        execution_service: IntegrationExecutionService,
        runner: SyncJobRunner,
        target_store: ISyncTargetStore,
        locks: AggregateLockRegistry,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__()
        self._sync_job_repository = sync_job_repository
        self._integration_repository = integration_repository
        self._mapping_repository = mapping_repository
        self._execution_service = execution_service
        self._runner = runner
        self._target_store = target_store
        self._locks = locks
        self._clock = clock

    async def handle(self, command: RunSyncJobCommand) -> CommandResult[SyncRunDTO]:
        with bound_log_context(job_id=str(command.job_id)):
            async with self._locks.hold(command.job_id):
                job = await load_owned_sync_job(
                    self._sync_job_repository, command.job_id, command.owner_id
                )
                mapping = await self._load_mapping(job)

                records = command.records
                if records is None:
                    if not job.direction.pulls:
                        raise ValidationError(
                            "Push sync jobs need records to be supplied", field="records"
                        )
                    records, failure = await self._pull_records(job, command.owner_id)
                    if failure is not None:
                        job.start_run()
                        job.fail_run(failure, self._clock())
                        await self._sync_job_repository.save(job)
                        logger.warning("Sync source execution failed", error=failure)
                        return CommandResult.failure_result(
                            failure,
                            error_code="SYNC_SOURCE_FAILED",
                            data=SyncRunDTO(job=SyncJobDTO.from_domain(job), summary={}),
                        )

                try:
                    summary = await self._runner.run(
                        job, mapping, records, self._target_store, command.lookup_tables
                    )
                except FlowCreateError:
                    await self._sync_job_repository.save(job)
                    raise
                await self._sync_job_repository.save(job)

        warnings = []
        if summary.deferred:
            warnings.append(
                f"{summary.deferred} record(s) deferred beyond batch size {job.batch_size}"
            )
        if summary.failed:
            warnings.append(f"{summary.failed} record(s) failed to sync")

        return CommandResult.success_result(
            SyncRunDTO(job=SyncJobDTO.from_domain(job), summary=summary.to_dict()),
            warnings=warnings,
        )

    async def _load_mapping(self, job: SyncJob) -> DataMapping | None:
        if job.mapping_id is None:
            return None
        mapping = await self._mapping_repository.get_by_id(job.mapping_id)
        if mapping is None:
            raise NotFoundError("Data mapping", job.mapping_id)
        if not mapping.is_active:
            raise PreconditionFailedError("run sync job", "its data mapping is inactive")
        return mapping

    async def _pull_records(
        self, job: SyncJob, owner_id: UUID
    ) -> tuple[list[Any], str | None]:
        async with self._locks.hold(job.integration_id):
            integration = await load_owned_integration(
                self._integration_repository, job.integration_id, owner_id
            )
            try:
                result = await self._execution_service.execute_integration(
                    integration,
                    ExecutionContext(trigger=ExecutionTrigger.SYNC, owner_id=owner_id),
                    mappings=[],
                )
            except Exception:
                await self._integration_repository.save(integration)
                raise
            if result.error_kind != ExecutionErrorKind.PRECONDITION:
                await self._integration_repository.save(integration)

        if not result.success:
            return [], f"Source execution failed: {result.error_message}"

        data = result.response_data
        if data is None:
            return [], None
        return (list(data) if isinstance(data, list) else [data]), None

    @property
    def command_type(self) -> type[RunSyncJobCommand]:
        return RunSyncJobCommand
