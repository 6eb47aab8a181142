"""Get integration health query and handler."""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from flowcreate.core.cqrs.base import Query, QueryHandler, QueryResult
from flowcreate.core.domain.base import utc_now
from flowcreate.core.errors import ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import IntegrationHealthDTO
from flowcreate.modules.integration.application.services import load_owned_integration
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)
from flowcreate.modules.integration.domain.services import IntegrationExecutionService

logger = get_logger(__name__)


class GetIntegrationHealthQuery(Query):
    """Query to assess the operational health of an integration."""

    def __init__(self, integration_id: UUID, owner_id: UUID):
        super().__init__()
        self.integration_id = integration_id
        self.owner_id = owner_id
        self._freeze()

    def validate(self) -> None:
        if not self.integration_id or not self.owner_id:
            raise ValidationError("integration_id and owner_id are required")


class GetIntegrationHealthQueryHandler(
    QueryHandler[GetIntegrationHealthQuery, IntegrationHealthDTO]
):
    """Handler for getting integration health.

    The assessment is computed from the stored snapshot at query time; it is
    never cached.
    """

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        execution_service: IntegrationExecutionService,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._execution_service = execution_service
        self._clock = clock

    async def handle(self, query: GetIntegrationHealthQuery) -> QueryResult[IntegrationHealthDTO]:
        integration = await load_owned_integration(
            self._integration_repository, query.integration_id, query.owner_id
        )
        assessment = self._execution_service.get_integration_health(
            integration, self._clock()
        )

        logger.debug(
            "Integration health assessed",
            integration_id=str(integration.id),
            score=assessment.score,
            status=assessment.status.value,
        )
        return QueryResult.success_result(
            IntegrationHealthDTO.from_domain(integration.id, integration.name, assessment)
        )

    @property
    def query_type(self) -> type[GetIntegrationHealthQuery]:
        return GetIntegrationHealthQuery
