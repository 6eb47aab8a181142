"""Ownership-checked aggregate loading for handlers."""

from typing import Any
from uuid import UUID

from flowcreate.core.errors import NotFoundError, UnauthorizedError
from flowcreate.modules.integration.domain.aggregates import (
    DataMapping,
    Integration,
    SyncJob,
)
from flowcreate.modules.integration.domain.errors import IntegrationNotFoundError
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
    IIntegrationRepository,
    ISyncJobRepository,
)


def ensure_owner(aggregate: Any, owner_id: UUID, resource: str) -> None:
    """
    Raises:
        UnauthorizedError: If ``owner_id`` does not own the aggregate
    """
    if not aggregate.is_owned_by(owner_id):
        raise UnauthorizedError(
            f"User {owner_id} does not own {resource} {aggregate.id}"
        )


async def load_owned_integration(
    repository: IIntegrationRepository, integration_id: UUID, owner_id: UUID
) -> Integration:
    integration = await repository.get_by_id(integration_id)
    if integration is None:
        raise IntegrationNotFoundError(integration_id)
    ensure_owner(integration, owner_id, "integration")
    return integration


async def load_owned_mapping(
    repository: IDataMappingRepository, mapping_id: UUID, owner_id: UUID
) -> DataMapping:
    mapping = await repository.get_by_id(mapping_id)
    if mapping is None:
        raise NotFoundError("Data mapping", mapping_id)
    ensure_owner(mapping, owner_id, "data mapping")
    return mapping


async def load_owned_sync_job(
    repository: ISyncJobRepository, job_id: UUID, owner_id: UUID
) -> SyncJob:
    job = await repository.get_by_id(job_id)
    if job is None:
        raise NotFoundError("Sync job", job_id)
    ensure_owner(job, owner_id, "sync job")
    return job
