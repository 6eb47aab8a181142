"""Integration queries and their handlers."""

from .catalog import (
    GetAvailableIntegrationTypesQuery,
    GetAvailableIntegrationTypesQueryHandler,
    GetIntegrationTemplatesQuery,
    GetIntegrationTemplatesQueryHandler,
)
from .get_integration import GetIntegrationQuery, GetIntegrationQueryHandler
from .get_integration_health import (
    GetIntegrationHealthQuery,
    GetIntegrationHealthQueryHandler,
)
from .get_integration_metrics import (
    GetIntegrationMetricsQuery,
    GetIntegrationMetricsQueryHandler,
)
from .get_integration_stats import (
    GetIntegrationStatsQuery,
    GetIntegrationStatsQueryHandler,
)
from .get_integrations_by_user import (
    GetIntegrationsByUserQuery,
    GetIntegrationsByUserQueryHandler,
)
from .get_sync_jobs_by_integration import (
    GetSyncJobsByIntegrationQuery,
    GetSyncJobsByIntegrationQueryHandler,
)
from .get_upcoming_sync_jobs import (
    GetUpcomingSyncJobsQuery,
    GetUpcomingSyncJobsQueryHandler,
)
from .search_integrations import (
    SearchIntegrationsQuery,
    SearchIntegrationsQueryHandler,
)
from .validate_data_mapping import (
    ValidateDataMappingQuery,
    ValidateDataMappingQueryHandler,
)

__all__ = [
    "GetAvailableIntegrationTypesQuery",
    "GetAvailableIntegrationTypesQueryHandler",
    "GetIntegrationHealthQuery",
    "GetIntegrationHealthQueryHandler",
    "GetIntegrationMetricsQuery",
    "GetIntegrationMetricsQueryHandler",
    "GetIntegrationQuery",
    "GetIntegrationQueryHandler",
    "GetIntegrationStatsQuery",
    "GetIntegrationStatsQueryHandler",
    "GetIntegrationTemplatesQuery",
    "GetIntegrationTemplatesQueryHandler",
    "GetIntegrationsByUserQuery",
    "GetIntegrationsByUserQueryHandler",
    "GetSyncJobsByIntegrationQuery",
    "GetSyncJobsByIntegrationQueryHandler",
    "GetUpcomingSyncJobsQuery",
    "GetUpcomingSyncJobsQueryHandler",
    "SearchIntegrationsQuery",
    "SearchIntegrationsQueryHandler",
    "ValidateDataMappingQuery",
    "ValidateDataMappingQueryHandler",
]
