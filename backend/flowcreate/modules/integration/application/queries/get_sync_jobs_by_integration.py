"""Sync jobs of one integration."""

from uuid import UUID

from flowcreate.core.cqrs.base import Query, QueryHandler, QueryResult
from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.application.dto import SyncJobDTO
from flowcreate.modules.integration.application.services import load_owned_integration
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
    ISyncJobRepository,
)


class GetSyncJobsByIntegrationQuery(Query):
    def __init__(self, integration_id: UUID, owner_id: UUID, enabled_only: bool = False):
        super().__init__()
        self.integration_id = integration_id
        self.owner_id = owner_id
        self.enabled_only = enabled_only
        self._freeze()

    def validate(self) -> None:
        if not self.integration_id or not self.owner_id:
            raise ValidationError("integration_id and owner_id are required")


class GetSyncJobsByIntegrationQueryHandler(
    QueryHandler[GetSyncJobsByIntegrationQuery, list[SyncJobDTO]]
):
    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        sync_job_repository: ISyncJobRepository,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._sync_job_repository = sync_job_repository

    async def handle(
        self, query: GetSyncJobsByIntegrationQuery
    ) -> QueryResult[list[SyncJobDTO]]:
        integration = await load_owned_integration(
            self._integration_repository, query.integration_id, query.owner_id
        )
        jobs = await self._sync_job_repository.get_by_integration(integration.id)
        if query.enabled_only:
            jobs = [job for job in jobs if job.is_enabled]
        return QueryResult.success_result([SyncJobDTO.from_domain(job) for job in jobs])

    @property
    def query_type(self) -> type[GetSyncJobsByIntegrationQuery]:
        return GetSyncJobsByIntegrationQuery
