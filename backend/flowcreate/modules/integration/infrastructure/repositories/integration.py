"""In-memory Integration repository."""

from uuid import UUID

from flowcreate.modules.integration.domain.aggregates import Integration
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)
from flowcreate.modules.integration.infrastructure.repositories.base import (
    InMemoryRepository,
)


class InMemoryIntegrationRepository(InMemoryRepository[Integration], IIntegrationRepository):
    """Repository for managing Integration aggregates in process memory."""

    async def get_by_owner(self, owner_id: UUID) -> list[Integration]:
        return self._select(lambda integration: integration.owner_id == owner_id)
