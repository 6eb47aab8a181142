"""Validate a data mapping, optionally against a sample record."""

from typing import Any
from uuid import UUID

from flowcreate.core.cqrs.base import Query, QueryHandler, QueryResult
from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.application.services import load_owned_mapping
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
)
from flowcreate.modules.integration.domain.services import (
    DataTransformationService,
    TransformationContext,
)


class ValidateDataMappingQuery(Query):
    """Query to check a mapping's rules.

    With ``sample_data`` the mapping is also applied to the sample and the
    transformation outcome is returned as a preview. Nothing is persisted.
    """

    def __init__(
        self,
        mapping_id: UUID,
        owner_id: UUID,
        sample_data: dict[str, Any] | None = None,
        lookup_tables: dict[str, dict[str, Any]] | None = None,
    ):
        super().__init__()
        self.mapping_id = mapping_id
        self.owner_id = owner_id
        self.sample_data = sample_data
        self.lookup_tables = dict(lookup_tables or {})
        self._freeze()

    def validate(self) -> None:
        if not self.mapping_id or not self.owner_id:
            raise ValidationError("mapping_id and owner_id are required")


class ValidateDataMappingQueryHandler(QueryHandler[ValidateDataMappingQuery, dict]):
    def __init__(
        self,
        mapping_repository: IDataMappingRepository,
        transformation_service: DataTransformationService,
    ):
        super().__init__()
        self._mapping_repository = mapping_repository
        self._transformation_service = transformation_service

    async def handle(self, query: ValidateDataMappingQuery) -> QueryResult[dict[str, Any]]:
        mapping = await load_owned_mapping(
            self._mapping_repository, query.mapping_id, query.owner_id
        )
        validation = self._transformation_service.validate_mapping(mapping)

        data: dict[str, Any] = {
            "mapping_id": str(mapping.id),
            "mapping_version": mapping.mapping_version,
            "validation": validation.to_dict(),
        }
        if query.sample_data is not None:
            preview = self._transformation_service.transform(
                mapping,
                TransformationContext(
                    source_data=query.sample_data,
                    owner_id=query.owner_id,
                    lookup_tables=query.lookup_tables,
                ),
            )
            data["preview"] = preview.to_dict()

        return QueryResult.success_result(data, warnings=list(validation.warnings))

    @property
    def query_type(self) -> type[ValidateDataMappingQuery]:
        return ValidateDataMappingQuery
