"""DataMapping aggregate: declarative rules between two schemas."""

from typing import Any
from uuid import UUID

from flowcreate.core.domain.base import AggregateRoot
from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.domain.enums import TransformationKind
from flowcreate.modules.integration.domain.events import DataMappingCreated
from flowcreate.modules.integration.domain.value_objects import (
    DataSchema,
    FieldMapping,
    MappingValidationResult,
)


class DataMapping(AggregateRoot):
    """Translates payloads shaped like ``source_schema`` into ``target_schema``.

    Identity and schemas are fixed at creation; the field mapping list is
    mutable. Field mappings apply in declaration order.
    """

    def __init__(
        self,
        owner_id: UUID,
        integration_id: UUID,
        name: str,
        source_schema: DataSchema,
        target_schema: DataSchema,
        description: str | None = None,
        field_mappings: list[FieldMapping] | None = None,
        entity_id: UUID | None = None,
    ):
        super().__init__(entity_id)

        if not name or not name.strip():
            raise ValidationError("Mapping name cannot be empty", field="name")
        if not isinstance(source_schema, DataSchema):
            raise ValidationError("source_schema must be a DataSchema", field="source_schema")
        if not isinstance(target_schema, DataSchema):
            raise ValidationError("target_schema must be a DataSchema", field="target_schema")

        self.owner_id = owner_id
        self.integration_id = integration_id
        self.name = name.strip()
        self.description = (description or "").strip()
        self.source_schema = source_schema
        self.target_schema = target_schema
        self.field_mappings: list[FieldMapping] = []
        self.is_active = True
        self.mapping_version = 1

        for field_mapping in field_mappings or []:
            self._append(field_mapping)

        self.add_event(DataMappingCreated(self.id, integration_id, owner_id))

    def is_owned_by(self, user_id: UUID) -> bool:
        return self.owner_id == user_id

    @property
    def mapped_target_fields(self) -> set[str]:
        return {field_mapping.target_field for field_mapping in self.field_mappings}

    def get_field_mapping(self, mapping_id: str) -> FieldMapping | None:
        for field_mapping in self.field_mappings:
            if field_mapping.id == mapping_id:
                return field_mapping
        return None

    def _append(self, field_mapping: FieldMapping) -> None:
        if self.get_field_mapping(field_mapping.id) is not None:
            raise ValidationError(
                f"Field mapping with id '{field_mapping.id}' already exists",
                field="field_mappings",
            )
        if field_mapping.target_field in self.mapped_target_fields:
            raise ValidationError(
                f"Target field '{field_mapping.target_field}' is already mapped",
                field="field_mappings",
            )
        self.field_mappings.append(field_mapping)

    def _bump_version(self) -> None:
        self.mapping_version += 1
        self.increment_version()
        self.mark_modified()

    def add_field_mapping(self, field_mapping: FieldMapping) -> None:
        """
        Raises:
            ValidationError: On duplicate id or duplicate target field
        """
        self._append(field_mapping)
        self._bump_version()

    def update_field_mapping(self, mapping_id: str, **changes: Any) -> FieldMapping:
        current = self.get_field_mapping(mapping_id)
        if current is None:
            raise ValidationError(
                f"Field mapping '{mapping_id}' not found", field="field_mappings"
            )

        updated = current.with_changes(**changes)
        if updated.target_field != current.target_field and (
            updated.target_field in self.mapped_target_fields
        ):
            raise ValidationError(
                f"Target field '{updated.target_field}' is already mapped",
                field="field_mappings",
            )

        index = self.field_mappings.index(current)
        self.field_mappings[index] = updated
        self._bump_version()
        return updated

    def remove_field_mapping(self, mapping_id: str) -> None:
        current = self.get_field_mapping(mapping_id)
        if current is None:
            raise ValidationError(
                f"Field mapping '{mapping_id}' not found", field="field_mappings"
            )
        self.field_mappings.remove(current)
        self._bump_version()

    def activate(self) -> None:
        self.is_active = True
        self.mark_modified()

    def deactivate(self) -> None:
        self.is_active = False
        self.mark_modified()

    def validate_mapping(self) -> MappingValidationResult:
        """Structural validation of the rule set against both schemas.

        Checks required target coverage, that lookup and expression rules
        carry configuration, and that every referenced field exists in its
        schema. Unmapped optional target fields produce warnings.
        """
        errors: list[str] = []
        warnings: list[str] = []
        mapped_targets = self.mapped_target_fields

        for schema_field in self.target_schema.required_fields:
            if schema_field.name not in mapped_targets and not any(
                target.split(".", 1)[0] == schema_field.name for target in mapped_targets
            ):
                errors.append(f"Required target field '{schema_field.name}' is not mapped")

        for field_mapping in self.field_mappings:
            label = f"Mapping '{field_mapping.id}'"
            if field_mapping.kind.requires_config and not field_mapping.has_config:
                errors.append(
                    f"{label} uses {field_mapping.kind} transformation "
                    "but has no transformation config"
                )
            elif field_mapping.kind == TransformationKind.LOOKUP and not (
                field_mapping.config.get("table") or field_mapping.config.get("table_name")
            ):
                errors.append(f"{label} lookup config must define 'table' or 'table_name'")
            elif field_mapping.kind == TransformationKind.EXPRESSION and not str(
                field_mapping.config.get("expression", "")
            ).strip():
                errors.append(f"{label} expression config must define 'expression'")

            # expression rules reference their inputs inside the expression
            if field_mapping.kind != TransformationKind.EXPRESSION and not (
                self.source_schema.has_field(field_mapping.source_field)
            ):
                errors.append(
                    f"Source field '{field_mapping.source_field}' "
                    "does not exist in source schema"
                )
            if not self.target_schema.has_field(field_mapping.target_field):
                errors.append(
                    f"Target field '{field_mapping.target_field}' "
                    "does not exist in target schema"
                )

        for schema_field in self.target_schema.optional_fields:
            if schema_field.name not in mapped_targets:
                warnings.append(f"Optional target field '{schema_field.name}' is not mapped")

        return MappingValidationResult(
            is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "owner_id": str(self.owner_id),
            "integration_id": str(self.integration_id),
            "name": self.name,
            "description": self.description,
            "source_schema": self.source_schema.to_dict(),
            "target_schema": self.target_schema.to_dict(),
            "field_mappings": [fm.to_dict() for fm in self.field_mappings],
            "is_active": self.is_active,
            "mapping_version": self.mapping_version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def __str__(self) -> str:
        return f"DataMapping({self.name}, {len(self.field_mappings)} rules)"
