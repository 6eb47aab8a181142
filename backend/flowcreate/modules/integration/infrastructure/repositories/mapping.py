"""In-memory DataMapping repository."""

from uuid import UUID

from flowcreate.modules.integration.domain.aggregates import DataMapping
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
)
from flowcreate.modules.integration.infrastructure.repositories.base import (
    InMemoryRepository,
)


class InMemoryDataMappingRepository(
    InMemoryRepository[DataMapping], IDataMappingRepository
):
    """Repository for managing DataMapping aggregates in process memory."""

    async def get_by_integration(self, integration_id: UUID) -> list[DataMapping]:
        return self._select(lambda mapping: mapping.integration_id == integration_id)
