"""Integration repository interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from flowcreate.modules.integration.domain.aggregates import Integration


class IIntegrationRepository(ABC):
    """Repository interface for Integration aggregate operations."""

    @abstractmethod
    async def get_by_id(self, integration_id: UUID) -> Integration | None:
        """Get an integration by its ID.

        Returns:
            Integration | None: The integration if found, None otherwise
        """

    @abstractmethod
    async def get_by_owner(self, owner_id: UUID) -> list[Integration]:
        """Get every integration owned by a user, oldest first."""

    @abstractmethod
    async def save(self, integration: Integration) -> Integration:
        """Save an integration (create or update)."""

    @abstractmethod
    async def delete(self, integration_id: UUID) -> bool:
        """Delete an integration.

        Returns:
            bool: True if an integration was removed
        """
