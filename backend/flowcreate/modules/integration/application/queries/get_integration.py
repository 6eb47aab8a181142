"""Get integration query and handler."""

from uuid import UUID

from flowcreate.core.cqrs.base import Query, QueryHandler, QueryResult
from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.application.dto import IntegrationDTO
from flowcreate.modules.integration.application.services import load_owned_integration
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)


class GetIntegrationQuery(Query):
    """Query to get one integration of the acting user."""

    def __init__(self, integration_id: UUID, owner_id: UUID):
        super().__init__()
        self.integration_id = integration_id
        self.owner_id = owner_id
        self._freeze()

    def validate(self) -> None:
        if not self.integration_id or not self.owner_id:
            raise ValidationError("integration_id and owner_id are required")


class GetIntegrationQueryHandler(QueryHandler[GetIntegrationQuery, IntegrationDTO]):
    def __init__(self, integration_repository: IIntegrationRepository):
        super().__init__()
        self._integration_repository = integration_repository

    async def handle(self, query: GetIntegrationQuery) -> QueryResult[IntegrationDTO]:
        integration = await load_owned_integration(
            self._integration_repository, query.integration_id, query.owner_id
        )
        return QueryResult.success_result(IntegrationDTO.from_domain(integration))

    @property
    def query_type(self) -> type[GetIntegrationQuery]:
        return GetIntegrationQuery
