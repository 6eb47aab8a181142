"""Integration repository implementations."""

from .integration import InMemoryIntegrationRepository
from .mapping import InMemoryDataMappingRepository
from .sync_job import InMemorySyncJobRepository

__all__ = [
    "InMemoryDataMappingRepository",
    "InMemoryIntegrationRepository",
    "InMemorySyncJobRepository",
]
