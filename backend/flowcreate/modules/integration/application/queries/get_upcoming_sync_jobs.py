"""Upcoming sync jobs query and handler."""

from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import UUID

from flowcreate.core.cqrs.base import Query, QueryHandler, QueryResult
from flowcreate.core.domain.base import utc_now
from flowcreate.core.errors import ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import (
    IntegrationSummaryDTO,
    SyncJobDTO,
    UpcomingSyncJobDTO,
)
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
    ISyncJobRepository,
)

logger = get_logger(__name__)

MAX_HOURS_AHEAD = 24 * 30


class GetUpcomingSyncJobsQuery(Query):
    """Query for a user's enabled sync jobs due within ``hours_ahead``.

    Overdue jobs are included since their next run is already in the past.
    """

    def __init__(self, owner_id: UUID, hours_ahead: int = 24):
        super().__init__()
        self.owner_id = owner_id
        self.hours_ahead = hours_ahead
        self._freeze()

    def validate(self) -> None:
        if not self.owner_id:
            raise ValidationError("owner_id is required", field="owner_id")
        if not 1 <= self.hours_ahead <= MAX_HOURS_AHEAD:
            raise ValidationError(
                f"hours_ahead must be between 1 and {MAX_HOURS_AHEAD}",
                field="hours_ahead",
            )


class GetUpcomingSyncJobsQueryHandler(
    QueryHandler[GetUpcomingSyncJobsQuery, list[UpcomingSyncJobDTO]]
):
    def __init__(
        self,
        sync_job_repository: ISyncJobRepository,
        integration_repository: IIntegrationRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__()
        self._sync_job_repository = sync_job_repository
        self._integration_repository = integration_repository
        self._clock = clock

    async def handle(
        self, query: GetUpcomingSyncJobsQuery
    ) -> QueryResult[list[UpcomingSyncJobDTO]]:
        now = self._clock()
        horizon = now + timedelta(hours=query.hours_ahead)

        upcoming: list[UpcomingSyncJobDTO] = []
        for job in await self._sync_job_repository.get_by_owner(query.owner_id):
            next_run = job.resolve_next_run(now)
            if next_run is None or next_run > horizon:
                continue
            integration = await self._integration_repository.get_by_id(job.integration_id)
            if integration is None:
                logger.warning(
                    "Sync job references a missing integration",
                    job_id=str(job.id),
                    integration_id=str(job.integration_id),
                )
                continue
            upcoming.append(
                UpcomingSyncJobDTO(
                    job=SyncJobDTO.from_domain(job),
                    integration=IntegrationSummaryDTO.from_domain(integration),
                    next_run_at=next_run,
                )
            )

        upcoming.sort(key=lambda item: item.next_run_at)
        return QueryResult.success_result(upcoming)

    @property
    def query_type(self) -> type[GetUpcomingSyncJobsQuery]:
        return GetUpcomingSyncJobsQuery
