"""Add field mapping command and handler."""

from typing import Any
from uuid import UUID

from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.errors import ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import DataMappingDTO
from flowcreate.modules.integration.application.services import (
    build_field_mapping,
    load_owned_mapping,
)
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
)
from flowcreate.modules.integration.domain.services import DataTransformationService
from flowcreate.modules.integration.domain.value_objects import FieldMapping
from flowcreate.modules.integration.infrastructure.services import AggregateLockRegistry

logger = get_logger(__name__)


class AddFieldMappingCommand(Command):
    """Command to append one rule to a data mapping."""

    def __init__(
        self,
        mapping_id: UUID,
        owner_id: UUID,
        field_mapping: FieldMapping | dict[str, Any],
    ):
        super().__init__()
        self.mapping_id = mapping_id
        self.owner_id = owner_id
        self.field_mapping = field_mapping
        self._freeze()

    def validate(self) -> None:
        if not self.mapping_id or not self.owner_id:
            raise ValidationError("mapping_id and owner_id are required")
        if self.field_mapping is None:
            raise ValidationError("field_mapping is required", field="field_mapping")


class AddFieldMappingCommandHandler(CommandHandler[AddFieldMappingCommand, DataMappingDTO]):
    """Handler for adding field mappings.

    The rule itself must be well formed; remaining gaps of the mapping as a
    whole are reported as warnings.
    """

    def __init__(
        self,
        mapping_repository: IDataMappingRepository,
        transformation_service: DataTransformationService,
        locks: AggregateLockRegistry,
    ):
        super().__init__()
        self._mapping_repository = mapping_repository
        self._transformation_service = transformation_service
        self._locks = locks

    async def handle(self, command: AddFieldMappingCommand) -> CommandResult[DataMappingDTO]:
        field_mapping = build_field_mapping(command.field_mapping)

        async with self._locks.hold(command.mapping_id):
            mapping = await load_owned_mapping(
                self._mapping_repository, command.mapping_id, command.owner_id
            )
            known_errors = set(self._transformation_service.validate_mapping(mapping).errors)
            mapping.add_field_mapping(field_mapping)

            validation = self._transformation_service.validate_mapping(mapping)
            rule_errors = [error for error in validation.errors if error not in known_errors]
            if rule_errors:
                raise ValidationError.from_fields({"field_mapping": rule_errors})

            await self._mapping_repository.save(mapping)

        logger.info(
            "Field mapping added",
            mapping_id=str(mapping.id),
            field_mapping_id=field_mapping.id,
            mapping_version=mapping.mapping_version,
        )
        return CommandResult.success_result(
            DataMappingDTO.from_domain(mapping),
            warnings=[*validation.errors, *validation.warnings],
        )

    @property
    def command_type(self) -> type[AddFieldMappingCommand]:
        return AddFieldMappingCommand
