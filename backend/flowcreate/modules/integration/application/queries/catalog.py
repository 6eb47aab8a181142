"""Integration type and template catalog queries."""

from typing import Any

from flowcreate.core.cqrs.base import Query, QueryHandler, QueryResult
from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.application.services import (
    available_integration_types,
    find_templates,
)
from flowcreate.modules.integration.domain.enums import IntegrationType


class GetAvailableIntegrationTypesQuery(Query):
    def __init__(self):
        super().__init__()
        self._freeze()


class GetAvailableIntegrationTypesQueryHandler(
    QueryHandler[GetAvailableIntegrationTypesQuery, list[dict]]
):
    async def handle(
        self, query: GetAvailableIntegrationTypesQuery
    ) -> QueryResult[list[dict[str, Any]]]:
        return QueryResult.success_result(available_integration_types())

    @property
    def query_type(self) -> type[GetAvailableIntegrationTypesQuery]:
        return GetAvailableIntegrationTypesQuery


class GetIntegrationTemplatesQuery(Query):
    """Query for starter templates, optionally filtered by type and category."""

    def __init__(self, integration_type: str | None = None, category: str | None = None):
        super().__init__()
        self.integration_type = integration_type
        self.category = category
        self._freeze()

    def validate(self) -> None:
        if self.integration_type is not None:
            try:
                IntegrationType(self.integration_type)
            except ValueError as e:
                raise ValidationError(
                    f"Unknown integration type '{self.integration_type}'",
                    field="integration_type",
                ) from e


class GetIntegrationTemplatesQueryHandler(
    QueryHandler[GetIntegrationTemplatesQuery, list[dict]]
):
    async def handle(
        self, query: GetIntegrationTemplatesQuery
    ) -> QueryResult[list[dict[str, Any]]]:
        integration_type = (
            IntegrationType(query.integration_type).value
            if query.integration_type is not None
            else None
        )
        return QueryResult.success_result(
            find_templates(integration_type=integration_type, category=query.category)
        )

    @property
    def query_type(self) -> type[GetIntegrationTemplatesQuery]:
        return GetIntegrationTemplatesQuery
