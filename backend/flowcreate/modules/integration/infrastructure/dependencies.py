"""Integration module dependency configuration.

``build_integration_module`` assembles repositories, services and handlers
and registers every handler on a command bus and a query bus. Any
collaborator can be injected; the defaults are the in-memory repositories,
the httpx transport and the environment-backed secret resolver.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from flowcreate.core.config import EngineConfig, get_settings
from flowcreate.core.cqrs.base import CommandBus, QueryBus
from flowcreate.core.domain.base import utc_now
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.commands import (
    ActivateIntegrationCommandHandler,
    AddFieldMappingCommandHandler,
    ArchiveIntegrationCommandHandler,
    BulkChangeIntegrationStatusCommandHandler,
    CloneIntegrationCommandHandler,
    CreateDataMappingCommandHandler,
    CreateIntegrationCommandHandler,
    CreateSyncJobCommandHandler,
    DeleteDataMappingCommandHandler,
    DeleteIntegrationCommandHandler,
    ExecuteIntegrationCommandHandler,
    PauseIntegrationCommandHandler,
    RefreshCredentialsCommandHandler,
    ResumeIntegrationCommandHandler,
    RunSyncJobCommandHandler,
    SetSyncJobEnabledCommandHandler,
    TestIntegrationCommandHandler,
    UpdateIntegrationCommandHandler,
)
from flowcreate.modules.integration.application.queries import (
    GetAvailableIntegrationTypesQueryHandler,
    GetIntegrationHealthQueryHandler,
    GetIntegrationMetricsQueryHandler,
    GetIntegrationQueryHandler,
    GetIntegrationStatsQueryHandler,
    GetIntegrationsByUserQueryHandler,
    GetIntegrationTemplatesQueryHandler,
    GetSyncJobsByIntegrationQueryHandler,
    GetUpcomingSyncJobsQueryHandler,
    SearchIntegrationsQueryHandler,
    ValidateDataMappingQueryHandler,
)
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
    IIntegrationRepository,
    ISyncJobRepository,
)
from flowcreate.modules.integration.domain.interfaces.services import (
    ISecretResolver,
    ISyncTargetStore,
    ITransport,
)
from flowcreate.modules.integration.domain.services import (
    DataTransformationService,
    IntegrationExecutionService,
    SyncJobRunner,
)
from flowcreate.modules.integration.infrastructure.http_clients import HttpTransport
from flowcreate.modules.integration.infrastructure.repositories import (
    InMemoryDataMappingRepository,
    InMemoryIntegrationRepository,
    InMemorySyncJobRepository,
)
from flowcreate.modules.integration.infrastructure.services import (
    AggregateLockRegistry,
    EnvironmentSecretResolver,
    InMemorySyncTargetStore,
)

logger = get_logger(__name__)


@dataclass
class IntegrationModule:
    """Wired integration module."""

    command_bus: CommandBus
    query_bus: QueryBus
    integration_repository: IIntegrationRepository
    mapping_repository: IDataMappingRepository
    sync_job_repository: ISyncJobRepository
    transport: ITransport
    target_store: ISyncTargetStore
    execution_service: IntegrationExecutionService
    transformation_service: DataTransformationService
    locks: AggregateLockRegistry

    async def close(self) -> None:
        """Release transport resources owned by the module."""
        close = getattr(self.transport, "close", None)
        if close is not None:
            await close()


def build_integration_module(
    config: EngineConfig | None = None,
    integration_repository: IIntegrationRepository | None = None,
    mapping_repository: IDataMappingRepository | None = None,
    sync_job_repository: ISyncJobRepository | None = None,
    transport: ITransport | None = None,
    secret_resolver: ISecretResolver | None = None,
    target_store: ISyncTargetStore | None = None,
    lookup_tables: dict[str, dict] | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> IntegrationModule:
    """Wire the integration module.

    Args:
        config: Engine tunables, read from settings when omitted
        integration_repository: Integration storage
        mapping_repository: Data mapping storage
        sync_job_repository: Sync job storage
        transport: How executions reach external systems
        secret_resolver: Resolves credential secret references
        target_store: Where sync runs write records
        lookup_tables: Named lookup tables available to every mapping
        clock: Source of the current time
    """
    config = config or get_settings().engine
    integration_repository = integration_repository or InMemoryIntegrationRepository()
    mapping_repository = mapping_repository or InMemoryDataMappingRepository()
    sync_job_repository = sync_job_repository or InMemorySyncJobRepository()
    transport = transport or HttpTransport()
    secret_resolver = secret_resolver or EnvironmentSecretResolver()
    target_store = target_store or InMemorySyncTargetStore()
    locks = AggregateLockRegistry()

    transformation_service = DataTransformationService(lookup_tables=lookup_tables)
    execution_service = IntegrationExecutionService(
        transport=transport,
        secret_resolver=secret_resolver,
        transformation_service=transformation_service,
        config=config,
        clock=clock,
    )
    runner = SyncJobRunner(transformation_service=transformation_service, clock=clock)

    command_bus = CommandBus()
    for handler in (
        CreateIntegrationCommandHandler(integration_repository, execution_service, config),
        UpdateIntegrationCommandHandler(integration_repository, locks, config),
        RefreshCredentialsCommandHandler(integration_repository, locks, config),
        CloneIntegrationCommandHandler(integration_repository),
        DeleteIntegrationCommandHandler(
            integration_repository, mapping_repository, sync_job_repository, locks
        ),
        ActivateIntegrationCommandHandler(integration_repository, locks, clock),
        PauseIntegrationCommandHandler(integration_repository, locks, clock),
        ResumeIntegrationCommandHandler(integration_repository, locks, clock),
        ArchiveIntegrationCommandHandler(integration_repository, locks, clock),
        BulkChangeIntegrationStatusCommandHandler(integration_repository, locks, clock),
        ExecuteIntegrationCommandHandler(
            integration_repository, mapping_repository, execution_service, locks
        ),
        TestIntegrationCommandHandler(integration_repository, execution_service, locks),
        CreateDataMappingCommandHandler(
            integration_repository, mapping_repository, transformation_service
        ),
        AddFieldMappingCommandHandler(mapping_repository, transformation_service, locks),
        DeleteDataMappingCommandHandler(mapping_repository, sync_job_repository, locks),
        CreateSyncJobCommandHandler(
            integration_repository, mapping_repository, sync_job_repository, config, clock
        ),
        RunSyncJobCommandHandler(
            sync_job_repository,
            integration_repository,
            mapping_repository,
            execution_service,
            runner,
            target_store,
            locks,
            clock,
        ),
        SetSyncJobEnabledCommandHandler(
            sync_job_repository, integration_repository, locks, clock
        ),
    ):
        command_bus.register(handler)

    query_bus = QueryBus()
    for handler in (
        GetIntegrationQueryHandler(integration_repository),
        GetIntegrationsByUserQueryHandler(integration_repository, config),
        SearchIntegrationsQueryHandler(integration_repository, config),
        GetIntegrationHealthQueryHandler(integration_repository, execution_service, clock),
        GetIntegrationMetricsQueryHandler(integration_repository),
        GetIntegrationStatsQueryHandler(integration_repository, clock),
        GetUpcomingSyncJobsQueryHandler(sync_job_repository, integration_repository, clock),
        GetSyncJobsByIntegrationQueryHandler(integration_repository, sync_job_repository),
        ValidateDataMappingQueryHandler(mapping_repository, transformation_service),
        GetAvailableIntegrationTypesQueryHandler(),
        GetIntegrationTemplatesQueryHandler(),
    ):
        query_bus.register(handler)

    logger.info(
        "Integration module configured",
        commands=command_bus.get_metrics()["registered_handlers"],
        queries=query_bus.get_metrics()["registered_handlers"],
        transport=transport.__class__.__name__,
    )
    return IntegrationModule(
        command_bus=command_bus,
        query_bus=query_bus,
        integration_repository=integration_repository,
        mapping_repository=mapping_repository,
        sync_job_repository=sync_job_repository,
        transport=transport,
        target_store=target_store,
        execution_service=execution_service,
        transformation_service=transformation_service,
        locks=locks,
    )
