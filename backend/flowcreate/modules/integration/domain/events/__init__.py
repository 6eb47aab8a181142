"""Integration domain events."""

from .integration_events import (
    IntegrationCreated,
    IntegrationCredentialsRefreshed,
    IntegrationExecuted,
    IntegrationStatusChanged,
)
from .sync_events import DataMappingCreated, SyncJobCreated, SyncRunCompleted

__all__ = [
    "DataMappingCreated",
    "IntegrationCreated",
    "IntegrationCredentialsRefreshed",
    "IntegrationExecuted",
    "IntegrationStatusChanged",
    "SyncJobCreated",
    "SyncRunCompleted",
]
