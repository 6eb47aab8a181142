"""Create data mapping command and handler."""

from collections.abc import Iterable
from typing import Any
from uuid import UUID

from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.errors import ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import DataMappingDTO
from flowcreate.modules.integration.application.services import (
    build_field_mapping,
    build_schema,
    load_owned_integration,
)
from flowcreate.modules.integration.domain.aggregates import DataMapping
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
    IIntegrationRepository,
)
from flowcreate.modules.integration.domain.services import DataTransformationService
from flowcreate.modules.integration.domain.value_objects import DataSchema, FieldMapping

logger = get_logger(__name__)


class CreateDataMappingCommand(Command):
    """Command to define how an integration's payloads are translated."""

    def __init__(
        self,
        owner_id: UUID,
        integration_id: UUID,
        name: str,
        source_schema: DataSchema | dict[str, Any],
        target_schema: DataSchema | dict[str, Any],
        description: str | None = None,
        field_mappings: Iterable[FieldMapping | dict[str, Any]] | None = None,
    ):
        """Initialize create data mapping command.

        Args:
            owner_id: User creating the mapping
            integration_id: Integration the mapping belongs to
            name: Mapping name
            source_schema: Shape of incoming payloads
            target_schema: Shape of produced payloads
            description: Optional description
            field_mappings: Optional initial rules, applied in order
        """
        super().__init__()
        self.owner_id = owner_id
        self.integration_id = integration_id
        self.name = name
        self.source_schema = source_schema
        self.target_schema = target_schema
        self.description = description
        self.field_mappings = list(field_mappings or [])
        self._freeze()

    def validate(self) -> None:
        field_errors: dict[str, list[str]] = {}
        if not self.owner_id:
            field_errors["owner_id"] = ["owner_id is required"]
        if not self.integration_id:
            field_errors["integration_id"] = ["integration_id is required"]
        if not self.name or not self.name.strip():
            field_errors["name"] = ["Mapping name is required"]
        if self.source_schema is None:
            field_errors["source_schema"] = ["Source schema is required"]
        if self.target_schema is None:
            field_errors["target_schema"] = ["Target schema is required"]
        if field_errors:
            raise ValidationError.from_fields(field_errors)


class CreateDataMappingCommandHandler(
    CommandHandler[CreateDataMappingCommand, DataMappingDTO]
):
    """Handler for creating data mappings.

    Rule problems such as uncovered required target fields do not block
    creation; they are returned as warnings since the mapping is usually
    completed with further field mappings.
    """

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        mapping_repository: IDataMappingRepository,
        transformation_service: DataTransformationService,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._mapping_repository = mapping_repository
        self._transformation_service = transformation_service

    async def handle(self, command: CreateDataMappingCommand) -> CommandResult[DataMappingDTO]:
        integration = await load_owned_integration(
            self._integration_repository, command.integration_id, command.owner_id
        )

        mapping = DataMapping(
            owner_id=command.owner_id,
            integration_id=integration.id,
            name=command.name,
            source_schema=build_schema(command.source_schema, "source_schema"),
            target_schema=build_schema(command.target_schema, "target_schema"),
            description=command.description,
            field_mappings=[build_field_mapping(fm) for fm in command.field_mappings],
        )
        validation = self._transformation_service.validate_mapping(mapping)

        await self._mapping_repository.save(mapping)

        logger.info(
            "Data mapping created",
            mapping_id=str(mapping.id),
            integration_id=str(integration.id),
            field_mappings=len(mapping.field_mappings),
            is_valid=validation.is_valid,
        )
        return CommandResult.success_result(
            DataMappingDTO.from_domain(mapping),
            warnings=[*validation.errors, *validation.warnings],
        )

    @property
    def command_type(self) -> type[CreateDataMappingCommand]:
        return CreateDataMappingCommand
