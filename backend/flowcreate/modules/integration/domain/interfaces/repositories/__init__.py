"""Integration repository interfaces."""

from .integration_repository import IIntegrationRepository
from .mapping_repository import IDataMappingRepository
from .sync_job_repository import ISyncJobRepository

__all__ = ["IDataMappingRepository", "IIntegrationRepository", "ISyncJobRepository"]
