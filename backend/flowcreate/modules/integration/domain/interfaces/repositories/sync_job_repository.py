"""Sync job repository interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from flowcreate.modules.integration.domain.aggregates import SyncJob


class ISyncJobRepository(ABC):
    """Repository interface for SyncJob aggregate operations."""

    @abstractmethod
    async def get_by_id(self, job_id: UUID) -> SyncJob | None:
        """Get a sync job by its ID."""

    @abstractmethod
    async def get_by_owner(self, owner_id: UUID) -> list[SyncJob]:
        """Get all sync jobs owned by a user."""

    @abstractmethod
    async def get_by_integration(self, integration_id: UUID) -> list[SyncJob]:
        """Get all sync jobs running over an integration."""

    @abstractmethod
    async def get_by_mapping(self, mapping_id: UUID) -> list[SyncJob]:
        """Get all sync jobs that use a data mapping."""

    @abstractmethod
    async def save(self, job: SyncJob) -> SyncJob:
        """Save a sync job (create or update)."""

    @abstractmethod
    async def delete(self, job_id: UUID) -> bool:
        """Delete a sync job."""
