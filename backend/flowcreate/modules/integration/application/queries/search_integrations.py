"""Search integrations query and handler."""

from collections.abc import Iterable
from datetime import datetime
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
from flowcreate.modules.integration.application.services.integration_filters import (
    SORT_FIELDS,
    SORT_ORDERS,
)
from flowcreate.modules.integration.domain.enums import IntegrationStatus, IntegrationType
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)

logger = get_logger(__name__)


class SearchIntegrationsQuery(Query):
    """Full-text search over name, description and tags of a user's integrations."""

    def __init__(
        self,
        owner_id: UUID,
        term: str = "",
        status: IntegrationStatus | str | None = None,
        integration_type: IntegrationType | str | None = None,
        tags: Iterable[str] | None = None,
        created_after: datetime | None = None,
        created_before: datetime | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int | None = None,
        offset: int = 0,
    ):
        super().__init__()
        self.owner_id = owner_id
        self.term = term or ""
        self.status = status
        self.integration_type = integration_type
        self.tags = list(tags or [])
        self.created_after = created_after
        self.created_before = created_before
        self.sort_by = sort_by
        self.sort_order = sort_order
        self.limit = limit
        self.offset = offset
        self._freeze()

    def validate(self) -> None:
        field_errors: dict[str, list[str]] = {}
        if not self.owner_id:
            field_errors["owner_id"] = ["owner_id is required"]
        if self.sort_by not in SORT_FIELDS:
            field_errors["sort_by"] = [f"sort_by must be one of: {', '.join(SORT_FIELDS)}"]
        if self.sort_order not in SORT_ORDERS:
            field_errors["sort_order"] = ["sort_order must be asc or desc"]
        if field_errors:
            raise ValidationError.from_fields(field_errors)


class SearchIntegrationsQueryHandler(
    QueryHandler[SearchIntegrationsQuery, list[IntegrationDTO]]
):
    """Handler for integration search."""

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        config: EngineConfig | None = None,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._config = config or EngineConfig()

    async def handle(self, query: SearchIntegrationsQuery) -> QueryResult[list[IntegrationDTO]]:
        limit = query.limit if query.limit is not None else self._config.default_page_size
        validate_page(limit, query.offset)
        filters = IntegrationFilters.parse(
            term=query.term,
            status=query.status,
            integration_type=query.integration_type,
            tags=query.tags,
            created_after=query.created_after,
            created_before=query.created_before,
        )

        matches = filters.apply(
            await self._integration_repository.get_by_owner(query.owner_id)
        )
        ordered = sort_integrations(matches, query.sort_by, query.sort_order)

        logger.debug(
            "Integrations searched",
            owner_id=str(query.owner_id),
            term=query.term,
            matches=len(ordered),
        )
        return QueryResult.paginated_result(
            [IntegrationDTO.from_domain(i) for i in paginate(ordered, limit, query.offset)],
            total_count=len(ordered),
            limit=limit,
            offset=query.offset,
        )

    @property
    def query_type(self) -> type[SearchIntegrationsQuery]:
        return SearchIntegrationsQuery
