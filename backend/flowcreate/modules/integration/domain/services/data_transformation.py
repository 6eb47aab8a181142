"""Data transformation service for field mappings.

Applies a ``DataMapping`` to one source record. The pipeline is:

1. structural validation of the mapping (coverage, configs, expression syntax)
2. validation of the source record against the source schema
3. field mappings applied in declaration order
4. validation of the produced record against the target schema

Every failure is reported as a list of field-scoped errors on the returned
``TransformResult``; a partially transformed record is never returned.
Transformation reads no clock and performs no I/O, so identical inputs always
produce identical output.
"""

import json
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any
from uuid import UUID

from flowcreate.core.domain.base import DomainService
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.domain.aggregates import DataMapping
from flowcreate.modules.integration.domain.enums import TransformationKind
from flowcreate.modules.integration.domain.errors import ExpressionError
from flowcreate.modules.integration.domain.services.expression_evaluator import (
    ExpressionEvaluator,
)
from flowcreate.modules.integration.domain.value_objects import (
    DataSchema,
    FieldError,
    FieldMapping,
    MappingValidationResult,
    TransformResult,
    TransformStatistics,
)

logger = get_logger(__name__)

_MISSING = object()

_TRUE_STRINGS = {"true", "1", "yes", "y", "on"}
_FALSE_STRINGS = {"false", "0", "no", "n", "off", ""}


@dataclass(frozen=True)
class TransformationContext:
    """Inputs of one transformation besides the mapping itself."""

    source_data: Any
    target_schema: DataSchema | None = None
    owner_id: UUID | None = None
    execution_id: str | None = None
    lookup_tables: dict[str, dict[str, Any]] = field(default_factory=dict)


class FieldTransformError(Exception):
    """Internal signal for a value that cannot be transformed."""


class DataTransformationService(DomainService):
    """Service for transforming records between schemas."""

    def __init__(
        self,
        expression_evaluator: ExpressionEvaluator | None = None,
        lookup_tables: dict[str, dict[str, Any]] | None = None,
    ):
        """Initialize transformation service.

        Args:
            expression_evaluator: Evaluator for expression mappings
            lookup_tables: Named lookup tables available to every mapping
        """
        self._evaluator = expression_evaluator or ExpressionEvaluator()
        self._lookup_tables = dict(lookup_tables or {})

        self._formatters: dict[str, Callable[[Any, dict[str, Any]], Any]] = {
            "uppercase": self._format_uppercase,
            "lowercase": self._format_lowercase,
            "trim": self._format_trim,
            "capitalize": self._format_capitalize,
            "number": self._format_number,
            "string": self._format_string,
            "boolean": self._format_boolean,
            "date": self._format_date,
            "array": self._format_array,
            "json": self._format_json,
            "parse_json": self._format_parse_json,
        }

    @property
    def supported_formats(self) -> list[str]:
        return sorted(self._formatters)

    def validate_mapping(self, mapping: DataMapping) -> MappingValidationResult:
        """Structural validation plus expression syntax and format names."""
        structural = mapping.validate_mapping()
        errors = list(structural.errors)

        for field_mapping in mapping.field_mappings:
            if field_mapping.kind == TransformationKind.EXPRESSION:
                expression = str(field_mapping.config.get("expression", "")).strip()
                if expression:
                    problem = self._evaluator.validate(expression)
                    if problem:
                        errors.append(f"Mapping '{field_mapping.id}': {problem}")
            elif field_mapping.kind == TransformationKind.FORMAT:
                format_name = field_mapping.config.get("format")
                if format_name is not None and format_name not in self._formatters:
                    errors.append(
                        f"Mapping '{field_mapping.id}' uses unknown format '{format_name}'"
                    )

        return MappingValidationResult(
            is_valid=not errors,
            errors=tuple(errors),
            warnings=structural.warnings,
        )

    def transform(
        self, mapping: DataMapping, context: TransformationContext
    ) -> TransformResult:
        """Transform ``context.source_data`` through ``mapping``."""
        validation = self.validate_mapping(mapping)
        if not validation.is_valid:
            return TransformResult(
                success=False,
                is_valid=False,
                errors=tuple(FieldError("mapping", error) for error in validation.errors),
                warnings=validation.warnings,
            )

        source_errors = mapping.source_schema.validate_data(context.source_data)
        if source_errors:
            return TransformResult(
                success=False,
                is_valid=True,
                errors=tuple(source_errors),
                warnings=validation.warnings,
            )

        target: dict[str, Any] = {}
        errors: list[FieldError] = []
        warnings = list(validation.warnings)
        mapped = skipped = defaulted = 0

        for field_mapping in mapping.field_mappings:
            try:
                outcome = self._apply(field_mapping, context, target)
            except FieldTransformError as e:
                errors.append(FieldError(field_mapping.target_field, str(e)))
                continue

            if outcome == "mapped":
                mapped += 1
            elif outcome == "defaulted":
                defaulted += 1
            else:
                skipped += 1

        statistics = TransformStatistics(
            fields_mapped=mapped,
            fields_skipped=skipped,
            fields_defaulted=defaulted,
            fields_errored=len(errors),
        )

        if not errors:
            target_schema = context.target_schema or mapping.target_schema
            errors.extend(target_schema.validate_data(target))

        if errors:
            logger.debug(
                "Transformation failed",
                mapping_id=str(mapping.id),
                execution_id=context.execution_id,
                error_count=len(errors),
            )
            return TransformResult(
                success=False,
                is_valid=True,
                errors=tuple(errors),
                warnings=tuple(warnings),
                statistics=statistics,
            )

        return TransformResult(
            success=True,
            is_valid=True,
            transformed_data=target,
            warnings=tuple(warnings),
            statistics=statistics,
        )

    def _apply(
        self,
        field_mapping: FieldMapping,
        context: TransformationContext,
        target: dict[str, Any],
    ) -> str:
        """Apply one rule to ``target``; returns mapped, defaulted or skipped."""
        if field_mapping.kind == TransformationKind.EXPRESSION:
            try:
                value = self._evaluator.evaluate(
                    field_mapping.config["expression"], context.source_data
                )
            except ExpressionError as e:
                if field_mapping.has_default:
                    self._set_nested_value(
                        target, field_mapping.target_field, field_mapping.default_value
                    )
                    return "defaulted"
                raise FieldTransformError(e.reason) from e
            self._set_nested_value(target, field_mapping.target_field, value)
            return "mapped"

        value = self._get_nested_value(context.source_data, field_mapping.source_field)
        if value is _MISSING or value is None:
            if field_mapping.has_default:
                self._set_nested_value(
                    target, field_mapping.target_field, field_mapping.default_value
                )
                return "defaulted"
            if field_mapping.required:
                raise FieldTransformError(
                    f"Required source field '{field_mapping.source_field}' is missing"
                )
            return "skipped"

        if field_mapping.kind == TransformationKind.FORMAT:
            value = self._format(value, field_mapping.config)
        elif field_mapping.kind == TransformationKind.LOOKUP:
            value = self._lookup(value, field_mapping.config, context)

        self._set_nested_value(target, field_mapping.target_field, value)
        return "mapped"

    def _format(self, value: Any, config: dict[str, Any]) -> Any:
        format_name = config.get("format")
        if format_name is None:
            return value

        formatter = self._formatters.get(format_name)
        if formatter is None:
            raise FieldTransformError(f"Unknown format '{format_name}'")
        try:
            return formatter(value, config)
        except (TypeError, ValueError) as e:
            raise FieldTransformError(
                f"Cannot apply format '{format_name}' to {value!r}: {e}"
            ) from e

    def _lookup(
        self, value: Any, config: dict[str, Any], context: TransformationContext
    ) -> Any:
        table = config.get("table")
        if table is None:
            table_name = config.get("table_name")
            table = context.lookup_tables.get(table_name)
            if table is None:
                table = self._lookup_tables.get(table_name)
            if table is None:
                raise FieldTransformError(f"Lookup table '{table_name}' is not available")

        if not isinstance(table, dict):
            raise FieldTransformError("Lookup table must be a mapping")

        if isinstance(value, Hashable) and value in table:
            return table[value]
        if not isinstance(value, list | dict) and str(value) in table:
            return table[str(value)]
        if "default" in config:
            return config["default"]
        return value

    def _get_nested_value(self, data: Any, path: str) -> Any:
        """Get value from nested dictionary using dot notation."""
        current = data
        for key in path.split("."):
            if not isinstance(current, dict) or key not in current:
                return _MISSING
            current = current[key]
        return current

    def _set_nested_value(self, data: dict[str, Any], path: str, value: Any) -> None:
        """Set value in nested dictionary using dot notation."""
        keys = path.split(".")
        current = data
        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            elif not isinstance(current[key], dict):
                raise FieldTransformError(
                    f"Cannot set '{path}': '{key}' is not an object"
                )
            current = current[key]
        current[keys[-1]] = value

    # Formatters

    @staticmethod
    def _require_str(value: Any) -> str:
        if not isinstance(value, str):
            raise TypeError(f"expected a string, got {type(value).__name__}")
        return value

    def _format_uppercase(self, value: Any, config: dict[str, Any]) -> str:
        return self._require_str(value).upper()

    def _format_lowercase(self, value: Any, config: dict[str, Any]) -> str:
        return self._require_str(value).lower()

    def _format_trim(self, value: Any, config: dict[str, Any]) -> str:
        return self._require_str(value).strip()

    def _format_capitalize(self, value: Any, config: dict[str, Any]) -> str:
        return self._require_str(value).capitalize()

    def _format_number(self, value: Any, config: dict[str, Any]) -> float | int:
        if isinstance(value, bool):
            raise TypeError("booleans are not numbers")
        decimals = int(config.get("decimals", 2))
        number = round(float(value), decimals)
        return int(number) if decimals == 0 else number

    def _format_string(self, value: Any, config: dict[str, Any]) -> str:
        if isinstance(value, datetime | date):
            return value.isoformat()
        return str(value)

    def _format_boolean(self, value: Any, config: dict[str, Any]) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int | float):
            return value != 0
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        raise ValueError("not a recognizable boolean")

    def _format_date(self, value: Any, config: dict[str, Any]) -> str:
        output_format = config.get("output_format", "%Y-%m-%d")
        if isinstance(value, datetime | date):
            return value.strftime(output_format)

        text = self._require_str(value)
        input_format = config.get("input_format")
        if input_format:
            parsed = datetime.strptime(text, input_format)
        else:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        return parsed.strftime(output_format)

    def _format_array(self, value: Any, config: dict[str, Any]) -> list[Any]:
        if isinstance(value, list | tuple):
            return list(value)
        delimiter = config.get("delimiter", ",")
        items = self._require_str(value).split(delimiter)
        return [item.strip() for item in items if item.strip()]

    def _format_json(self, value: Any, config: dict[str, Any]) -> str:
        return json.dumps(value, sort_keys=True, default=str)

    def _format_parse_json(self, value: Any, config: dict[str, Any]) -> Any:
        return json.loads(self._require_str(value))

    def __str__(self) -> str:
        return "DataTransformationService"
