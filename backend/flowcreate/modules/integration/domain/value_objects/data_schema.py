"""Schema value objects describing payload shapes."""

from typing import Any

from flowcreate.core.domain.base import ValueObject
from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.domain.enums import FieldType
from flowcreate.modules.integration.domain.value_objects.field_error import FieldError


class SchemaField(ValueObject):
    """A named, typed field of a schema."""

    def __init__(
        self,
        name: str,
        field_type: FieldType | str,
        required: bool = False,
        description: str | None = None,
    ):
        super().__init__()
        self.validate_not_empty(name, "field name")
        if not isinstance(field_type, FieldType):
            try:
                field_type = FieldType(field_type)
            except ValueError as e:
                allowed = ", ".join(t.value for t in FieldType)
                raise ValidationError(
                    f"Invalid type '{field_type}' for field '{name}'. Must be one of: {allowed}",
                    field=name,
                ) from e

        self.name = name.strip()
        self.field_type = field_type
        self.required = bool(required)
        self.description = description
        self._freeze()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.field_type.value,
            "required": self.required,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchemaField":
        return cls(
            name=data.get("name", ""),
            field_type=data.get("type", FieldType.STRING),
            required=data.get("required", False),
            description=data.get("description"),
        )

    def __str__(self) -> str:
        marker = "" if self.required else "?"
        return f"{self.name}{marker}: {self.field_type}"


class DataSchema(ValueObject):
    """Ordered description of a payload: name, version and fields."""

    def __init__(self, name: str, version: str, fields: list[SchemaField]):
        super().__init__()
        field_errors: dict[str, list[str]] = {}

        if not name or not name.strip():
            field_errors.setdefault("name", []).append("Schema name is required")
        if not version or not str(version).strip():
            field_errors.setdefault("version", []).append("Schema version is required")
        if not fields:
            field_errors.setdefault("fields", []).append(
                "Schema must have at least one field"
            )

        seen: set[str] = set()
        for schema_field in fields or []:
            if schema_field.name in seen:
                field_errors.setdefault("fields", []).append(
                    f"Duplicate field name '{schema_field.name}'"
                )
            seen.add(schema_field.name)

        if field_errors:
            raise ValidationError.from_fields(field_errors)

        self.name = name.strip()
        self.version = str(version).strip()
        self.fields = tuple(fields)
        self._freeze()

    @property
    def field_names(self) -> list[str]:
        return [schema_field.name for schema_field in self.fields]

    @property
    def required_fields(self) -> list[SchemaField]:
        return [schema_field for schema_field in self.fields if schema_field.required]

    @property
    def optional_fields(self) -> list[SchemaField]:
        return [schema_field for schema_field in self.fields if not schema_field.required]

    def get_field(self, name: str) -> SchemaField | None:
        for schema_field in self.fields:
            if schema_field.name == name:
                return schema_field
        return None

    def has_field(self, path: str) -> bool:
        """Check a field reference, resolving dotted paths by their first segment."""
        return self.get_field(path.split(".", 1)[0]) is not None

    def validate_data(self, data: Any) -> list[FieldError]:
        """Check ``data`` against this schema.

        Returns one error per violated field. A null value counts as missing.
        Fields not declared by the schema are ignored.
        """
        if not isinstance(data, dict):
            return [FieldError("", "Data must be an object")]

        errors = []
        for schema_field in self.fields:
            value = data.get(schema_field.name)
            if value is None:
                if schema_field.required:
                    errors.append(
                        FieldError(
                            schema_field.name,
                            f"Required field '{schema_field.name}' is missing",
                        )
                    )
                continue
            if not schema_field.field_type.matches(value):
                errors.append(
                    FieldError(
                        schema_field.name,
                        f"Field '{schema_field.name}' has invalid type. "
                        f"Expected {schema_field.field_type}",
                    )
                )
        return errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "fields": [schema_field.to_dict() for schema_field in self.fields],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DataSchema":
        return cls(
            name=data.get("name", ""),
            version=data.get("version", ""),
            fields=[SchemaField.from_dict(item) for item in data.get("fields", [])],
        )

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"
