"""Get integration metrics query and handler."""

from uuid import UUID

from flowcreate.core.cqrs.base import Query, QueryHandler, QueryResult
from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.application.dto import IntegrationMetricsDTO
from flowcreate.modules.integration.application.services import load_owned_integration
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)


class GetIntegrationMetricsQuery(Query):
    def __init__(self, integration_id: UUID, owner_id: UUID):
        super().__init__()
        self.integration_id = integration_id
        self.owner_id = owner_id
        self._freeze()

    def validate(self) -> None:
        if not self.integration_id or not self.owner_id:
            raise ValidationError("integration_id and owner_id are required")


class GetIntegrationMetricsQueryHandler(
    QueryHandler[GetIntegrationMetricsQuery, IntegrationMetricsDTO]
):
    """Returns the metrics snapshot as last saved."""

    def __init__(self, integration_repository: IIntegrationRepository):
        super().__init__()
        self._integration_repository = integration_repository

    async def handle(
        self, query: GetIntegrationMetricsQuery
    ) -> QueryResult[IntegrationMetricsDTO]:
        integration = await load_owned_integration(
            self._integration_repository, query.integration_id, query.owner_id
        )
        return QueryResult.success_result(
            IntegrationMetricsDTO.from_domain(integration.id, integration.metrics)
        )

    @property
    def query_type(self) -> type[GetIntegrationMetricsQuery]:
        return GetIntegrationMetricsQuery
