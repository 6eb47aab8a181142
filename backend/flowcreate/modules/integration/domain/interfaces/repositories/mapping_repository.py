"""Data mapping repository interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from flowcreate.modules.integration.domain.aggregates import DataMapping


class IDataMappingRepository(ABC):
    """Repository interface for DataMapping aggregate operations."""

    @abstractmethod
    async def get_by_id(self, mapping_id: UUID) -> DataMapping | None:
        """Get a data mapping by its ID."""

    @abstractmethod
    async def get_by_integration(self, integration_id: UUID) -> list[DataMapping]:
        """Get all mappings defined for an integration."""

    @abstractmethod
    async def save(self, mapping: DataMapping) -> DataMapping:
        """Save a data mapping (create or update)."""

    @abstractmethod
    async def delete(self, mapping_id: UUID) -> bool:
        """Delete a data mapping."""
