"""List a user's integrations with optional filters and paging."""

from collections.abc import Iterable
from uuid import UUID

from flowcreate.core.config import EngineConfig
from flowcreate.core.cqrs.base import Query, QueryHandler, QueryResult
from flowcreate.core.errors import ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import IntegrationDTO
from flowcreate.modules.integration.application.services import (
    IntegrationFilters,
    paginate,
    sort_integrations,
    validate_page,
)
from flowcreate.modules.integration.domain.enums import IntegrationStatus, IntegrationType
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)

logger = get_logger(__name__)


class GetIntegrationsByUserQuery(Query):
    """Query to list the integrations owned by a user, newest first."""

    def __init__(
        self,
        owner_id: UUID,
        status: IntegrationStatus | str | None = None,
        integration_type: IntegrationType | str | None = None,
        tags: Iterable[str] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ):
        """Initialize query.

        Args:
            owner_id: User whose integrations are listed
            status: Only integrations in this status
            integration_type: Only integrations of this type
            tags: Only integrations carrying all of these tags
            limit: Page size, defaults to the configured page size
            offset: Number of integrations to skip
        """
        super().__init__()
        self.owner_id = owner_id
        self.status = status
        self.integration_type = integration_type
        self.tags = list(tags or [])
        self.limit = limit
        self.offset = offset
        self._freeze()

    def validate(self) -> None:
        if not self.owner_id:
            raise ValidationError("owner_id is required", field="owner_id")


class GetIntegrationsByUserQueryHandler(
    QueryHandler[GetIntegrationsByUserQuery, list[IntegrationDTO]]
):
    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        config: EngineConfig | None = None,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._config = config or EngineConfig()

    async def handle(
        self, query: GetIntegrationsByUserQuery
    ) -> QueryResult[list[IntegrationDTO]]:
        limit = query.limit if query.limit is not None else self._config.default_page_size
        validate_page(limit, query.offset)
        filters = IntegrationFilters.parse(
            status=query.status, integration_type=query.integration_type, tags=query.tags
        )

        integrations = filters.apply(
            await self._integration_repository.get_by_owner(query.owner_id)
        )
        ordered = sort_integrations(integrations, "created_at", "desc")

        logger.debug(
            "Integrations listed",
            owner_id=str(query.owner_id),
            total=len(ordered),
            limit=limit,
            offset=query.offset,
        )
        return QueryResult.paginated_result(
            [IntegrationDTO.from_domain(i) for i in paginate(ordered, limit, query.offset)],
            total_count=len(ordered),
            limit=limit,
            offset=query.offset,
        )

    @property
    def query_type(self) -> type[GetIntegrationsByUserQuery]:
        return GetIntegrationsByUserQuery
