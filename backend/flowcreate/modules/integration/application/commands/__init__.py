"""Integration commands and their handlers."""

from .add_field_mapping import AddFieldMappingCommand, AddFieldMappingCommandHandler
from .change_integration_status import (
    ActivateIntegrationCommand,
    ActivateIntegrationCommandHandler,
    ArchiveIntegrationCommand,
    ArchiveIntegrationCommandHandler,
    BulkChangeIntegrationStatusCommand,
    BulkChangeIntegrationStatusCommandHandler,
    PauseIntegrationCommand,
    PauseIntegrationCommandHandler,
    ResumeIntegrationCommand,
    ResumeIntegrationCommandHandler,
    apply_status_action,
)
from .clone_integration import CloneIntegrationCommand, CloneIntegrationCommandHandler
from .create_data_mapping import (
    CreateDataMappingCommand,
    CreateDataMappingCommandHandler,
)
from .create_integration import (
    CreateIntegrationCommand,
    CreateIntegrationCommandHandler,
)
from .create_sync_job import CreateSyncJobCommand, CreateSyncJobCommandHandler
from .delete_data_mapping import (
    DeleteDataMappingCommand,
    DeleteDataMappingCommandHandler,
)
from .delete_integration import (
    DeleteIntegrationCommand,
    DeleteIntegrationCommandHandler,
)
from .execute_integration import (
    ExecuteIntegrationCommand,
    ExecuteIntegrationCommandHandler,
)
from .refresh_credentials import (
    RefreshCredentialsCommand,
    RefreshCredentialsCommandHandler,
)
from .run_sync_job import RunSyncJobCommand, RunSyncJobCommandHandler
from .set_sync_job_enabled import (
    SetSyncJobEnabledCommand,
    SetSyncJobEnabledCommandHandler,
)
from .integration_connection import TestIntegrationCommand, TestIntegrationCommandHandler
from .update_integration import (
    UpdateIntegrationCommand,
    UpdateIntegrationCommandHandler,
)

__all__ = [
    "ActivateIntegrationCommand",
    "ActivateIntegrationCommandHandler",
    "AddFieldMappingCommand",
    "AddFieldMappingCommandHandler",
    "ArchiveIntegrationCommand",
    "ArchiveIntegrationCommandHandler",
    "BulkChangeIntegrationStatusCommand",
    "BulkChangeIntegrationStatusCommandHandler",
    "CloneIntegrationCommand",
    "CloneIntegrationCommandHandler",
    "CreateDataMappingCommand",
    "CreateDataMappingCommandHandler",
    "CreateIntegrationCommand",
    "CreateIntegrationCommandHandler",
    "CreateSyncJobCommand",
    "CreateSyncJobCommandHandler",
    "DeleteDataMappingCommand",
    "DeleteDataMappingCommandHandler",
    "DeleteIntegrationCommand",
    "DeleteIntegrationCommandHandler",
    "ExecuteIntegrationCommand",
    "ExecuteIntegrationCommandHandler",
    "PauseIntegrationCommand",
    "PauseIntegrationCommandHandler",
    "RefreshCredentialsCommand",
    "RefreshCredentialsCommandHandler",
    "ResumeIntegrationCommand",
    "ResumeIntegrationCommandHandler",
    "RunSyncJobCommand",
    "RunSyncJobCommandHandler",
    "SetSyncJobEnabledCommand",
    "SetSyncJobEnabledCommandHandler",
    "TestIntegrationCommand",
    "TestIntegrationCommandHandler",
    "UpdateIntegrationCommand",
    "UpdateIntegrationCommandHandler",
    "apply_status_action",
]
