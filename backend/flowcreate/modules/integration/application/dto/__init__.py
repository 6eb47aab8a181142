"""Integration DTOs."""

from .bulk_dto import BulkOperationResultDTO
from .health_dto import IntegrationHealthDTO, IntegrationStatsDTO
from .integration_dto import IntegrationDTO, IntegrationMetricsDTO, IntegrationSummaryDTO
from .mapping_dto import DataMappingDTO
from .sync_dto import SyncJobDTO, SyncRunDTO, UpcomingSyncJobDTO

__all__ = [
    "BulkOperationResultDTO",
    "DataMappingDTO",
    "IntegrationDTO",
    "IntegrationHealthDTO",
    "IntegrationMetricsDTO",
    "IntegrationStatsDTO",
    "IntegrationSummaryDTO",
    "SyncJobDTO",
    "SyncRunDTO",
    "UpcomingSyncJobDTO",
]
