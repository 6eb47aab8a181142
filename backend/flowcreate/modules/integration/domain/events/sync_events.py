"""Data mapping and sync job events."""

from uuid import UUID

from flowcreate.core.domain.base import DomainEvent


class DataMappingCreated(DomainEvent):
    """Raised when a data mapping is created for an integration."""

    def __init__(self, mapping_id: UUID, integration_id: UUID, owner_id: UUID):
        super().__init__()
        self.mapping_id = mapping_id
        self.integration_id = integration_id
        self.owner_id = owner_id

    def __str__(self) -> str:
        return f"Data mapping {self.mapping_id} created"


class SyncJobCreated(DomainEvent):
    """Raised when a sync job is scheduled."""

    def __init__(self, job_id: UUID, integration_id: UUID, owner_id: UUID):
        super().__init__()
        self.job_id = job_id
        self.integration_id = integration_id
        self.owner_id = owner_id

    def __str__(self) -> str:
        return f"Sync job {self.job_id} created"


class SyncRunCompleted(DomainEvent):
    """Raised when a sync run finishes, successfully or not."""

    def __init__(
        self,
        job_id: UUID,
        success: bool,
        records_processed: int,
        failed: int,
    ):
        super().__init__()
        self.job_id = job_id
        self.success = success
        self.records_processed = records_processed
        self.failed = failed

    def __str__(self) -> str:
        return f"Sync job {self.job_id} run finished ({self.records_processed} records)"
