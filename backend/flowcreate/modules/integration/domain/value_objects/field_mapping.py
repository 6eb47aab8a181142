"""Field mapping value object describing one source-to-target rule."""

import re
from typing import Any
from uuid import uuid4

from flowcreate.core.domain.base import ValueObject
from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.domain.enums import TransformationKind

FIELD_PATH_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


class FieldMapping(ValueObject):
    """How one target field is produced from the source record.

    ``source_field`` and ``target_field`` accept dotted paths into nested
    objects. ``default_value`` is used when the source value is missing.
    """

    def __init__(
        self,
        source_field: str,
        target_field: str,
        kind: TransformationKind | str = TransformationKind.DIRECT,
        config: dict[str, Any] | None = None,
        required: bool = False,
        default_value: Any | None = None,
        mapping_id: str | None = None,
    ):
        super().__init__()
        if not isinstance(kind, TransformationKind):
            try:
                kind = TransformationKind(kind)
            except ValueError as e:
                allowed = ", ".join(k.value for k in TransformationKind)
                raise ValidationError(
                    f"Invalid transformation kind '{kind}'. Must be one of: {allowed}",
                    field="kind",
                ) from e

        field_errors: dict[str, list[str]] = {}
        for label, path in (("source_field", source_field), ("target_field", target_field)):
            if not path or not FIELD_PATH_PATTERN.match(path):
                field_errors.setdefault(label, []).append(
                    f"Invalid {label.replace('_', ' ')} '{path}'"
                )
        if field_errors:
            raise ValidationError.from_fields(field_errors)

        self.id = mapping_id or f"fm_{uuid4().hex[:12]}"
        self.source_field = source_field
        self.target_field = target_field
        self.kind = kind
        self.config = dict(config or {})
        self.required = bool(required)
        self.default_value = default_value
        self._freeze()

    @property
    def has_default(self) -> bool:
        return self.default_value is not None

    @property
    def has_config(self) -> bool:
        return bool(self.config)

    def with_changes(self, **changes: Any) -> "FieldMapping":
        """Return a copy with the given attributes replaced, keeping the id."""
        values = {
            "source_field": self.source_field,
            "target_field": self.target_field,
            "kind": self.kind,
            "config": self.config,
            "required": self.required,
            "default_value": self.default_value,
        }
        values.update(changes)
        return FieldMapping(mapping_id=self.id, **values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source_field": self.source_field,
            "target_field": self.target_field,
            "kind": self.kind.value,
            "config": dict(self.config),
            "required": self.required,
            "default_value": self.default_value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldMapping":
        return cls(
            source_field=data.get("source_field", ""),
            target_field=data.get("target_field", ""),
            kind=data.get("kind", TransformationKind.DIRECT),
            config=data.get("config"),
            required=data.get("required", False),
            default_value=data.get("default_value"),
            mapping_id=data.get("id"),
        )

    def __str__(self) -> str:
        return f"{self.source_field} -[{self.kind}]-> {self.target_field}"
