"""Aggregated integration statistics for one user."""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from flowcreate.core.cqrs.base import Query, QueryHandler, QueryResult
from flowcreate.core.domain.base import utc_now
from flowcreate.core.errors import ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import IntegrationStatsDTO
from flowcreate.modules.integration.domain.aggregates import Integration
from flowcreate.modules.integration.domain.enums import IntegrationStatus, StatsPeriod
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)

logger = get_logger(__name__)


def _trend(current: int, previous: int) -> dict[str, Any]:
    if previous == 0:
        change = 100.0 if current else 0.0
    else:
        change = (current - previous) / previous * 100
    return {
        "current": current,
        "previous": previous,
        "change_percentage": round(change, 2),
    }


def _count_between(
    integrations: list[Integration],
    instant: Callable[[Integration], datetime | None],
    start: datetime,
    end: datetime,
) -> int:
    count = 0
    for integration in integrations:
        at = instant(integration)
        if at is not None and start <= at < end:
            count += 1
    return count


class GetIntegrationStatsQuery(Query):
    """Query for a user's integration totals and period-over-period trends."""

    def __init__(self, owner_id: UUID, period: StatsPeriod | str = StatsPeriod.WEEK):
        super().__init__()
        self.owner_id = owner_id
        self.period = period
        self._freeze()

    def validate(self) -> None:
        field_errors: dict[str, list[str]] = {}
        if not self.owner_id:
            field_errors["owner_id"] = ["owner_id is required"]
        try:
            StatsPeriod(self.period)
        except ValueError:
            field_errors["period"] = ["period must be one of: day, week, month, year"]
        if field_errors:
            raise ValidationError.from_fields(field_errors)


class GetIntegrationStatsQueryHandler(
    QueryHandler[GetIntegrationStatsQuery, IntegrationStatsDTO]
):
    """Handler for integration statistics.

    Status counts and execution totals describe the current state. Trends
    compare the requested period with the one before it: integrations
    created, and integrations executed (by their latest execution).
    """

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._clock = clock

    async def handle(self, query: GetIntegrationStatsQuery) -> QueryResult[IntegrationStatsDTO]:
        period = StatsPeriod(query.period)
        now = self._clock()
        period_start = now - timedelta(days=period.days)
        previous_start = period_start - timedelta(days=period.days)

        integrations = await self._integration_repository.get_by_owner(query.owner_id)

        by_status = {status: 0 for status in IntegrationStatus}
        for integration in integrations:
            by_status[integration.status] += 1

        total_executions = sum(i.metrics.total_requests for i in integrations)
        successful = sum(i.metrics.successful_requests for i in integrations)
        weighted_time = sum(
            i.metrics.average_response_time_ms * i.metrics.total_requests
            for i in integrations
        )

        def created(integration: Integration) -> datetime:
            return integration.created_at

        def executed(integration: Integration) -> datetime | None:
            return integration.metrics.last_executed_at

        trends = {
            "integrations_created": _trend(
                _count_between(integrations, created, period_start, now),
                _count_between(integrations, created, previous_start, period_start),
            ),
            "integrations_executed": _trend(
                _count_between(integrations, executed, period_start, now),
                _count_between(integrations, executed, previous_start, period_start),
            ),
        }

        stats = IntegrationStatsDTO(
            period=period.value,
            period_start=period_start,
            period_end=now,
            total_integrations=len(integrations),
            active_integrations=by_status[IntegrationStatus.ACTIVE],
            paused_integrations=by_status[IntegrationStatus.PAUSED],
            draft_integrations=by_status[IntegrationStatus.DRAFT],
            archived_integrations=by_status[IntegrationStatus.ARCHIVED],
            total_executions=total_executions,
            successful_executions=successful,
            failed_executions=total_executions - successful,
            average_response_time_ms=(
                weighted_time / total_executions if total_executions else 0.0
            ),
            trends=trends,
        )

        logger.debug(
            "Integration stats computed",
            owner_id=str(query.owner_id),
            period=period.value,
            total_integrations=stats.total_integrations,
        )
        return QueryResult.success_result(stats)

    @property
    def query_type(self) -> type[GetIntegrationStatsQuery]:
        return GetIntegrationStatsQuery
