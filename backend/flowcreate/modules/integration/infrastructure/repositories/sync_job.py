"""In-memory SyncJob repository."""

from uuid import UUID

from flowcreate.modules.integration.domain.aggregates import SyncJob
from flowcreate.modules.integration.domain.interfaces.repositories import (
    ISyncJobRepository,
)
from flowcreate.modules.integration.infrastructure.repositories.base import (
    InMemoryRepository,
)


class InMemorySyncJobRepository(InMemoryRepository[SyncJob], ISyncJobRepository):
    """Repository for managing SyncJob aggregates in process memory."""

    async def get_by_owner(self, owner_id: UUID) -> list[SyncJob]:
        return self._select(lambda job: job.owner_id == owner_id)

    async def get_by_integration(self, integration_id: UUID) -> list[SyncJob]:
        return self._select(lambda job: job.integration_id == integration_id)

    async def get_by_mapping(self, mapping_id: UUID) -> list[SyncJob]:
        return self._select(lambda job: job.mapping_id == mapping_id)
