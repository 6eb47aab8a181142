"""Builds domain value objects from command payloads.

Commands accept either ready-made value objects or plain dictionaries (as
they arrive from an API layer); these helpers normalize both.
"""

from datetime import datetime, timedelta
from typing import Any

from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.domain.value_objects import (
    ApiEndpoint,
    Credential,
    DataSchema,
    FieldMapping,
    IntegrationConfig,
    RateLimitConfig,
    SyncSchedule,
)


def _parse_datetime(value: Any, field: str) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"Invalid datetime '{value}'", field=field) from e


def build_credential(
    data: Credential | dict[str, Any], refresh_lead: timedelta | None = None
) -> Credential:
    if isinstance(data, Credential):
        return data if refresh_lead is None else data.with_refresh_lead(refresh_lead)
    if not isinstance(data, dict):
        raise ValidationError("Authentication settings must be an object", field="auth")

    kwargs: dict[str, Any] = {}
    if refresh_lead is not None:
        kwargs["refresh_lead"] = refresh_lead
    return Credential(
        auth_type=data.get("type") or data.get("auth_type", ""),
        secret_ref=data.get("secret_ref", ""),
        expires_at=_parse_datetime(data.get("expires_at"), "auth.expires_at"),
        **kwargs,
    )


def build_integration_config(
    data: IntegrationConfig | dict[str, Any], refresh_lead: timedelta | None = None
) -> IntegrationConfig:
    """Normalize an integration config payload.

    Raises:
        ValidationError: If any part of the payload is malformed
    """
    if isinstance(data, IntegrationConfig):
        if refresh_lead is None:
            return data
        return data.with_auth(build_credential(data.auth, refresh_lead))
    if not isinstance(data, dict):
        raise ValidationError("Integration config must be an object", field="config")

    endpoints = [
        endpoint if isinstance(endpoint, ApiEndpoint) else ApiEndpoint.from_dict(endpoint)
        for endpoint in data.get("endpoints") or []
    ]

    rate_limits = data.get("rate_limits")
    if isinstance(rate_limits, dict):
        rate_limits = RateLimitConfig(
            requests_per_minute=rate_limits.get("requests_per_minute", 0),
            burst=rate_limits.get("burst"),
        )

    if data.get("auth") is None:
        raise ValidationError("Authentication credential is required", field="auth")

    return IntegrationConfig(
        integration_type=data.get("type", ""),
        endpoints=endpoints,
        auth=build_credential(data["auth"], refresh_lead),
        rate_limits=rate_limits,
    )


def build_schema(data: DataSchema | dict[str, Any], field: str) -> DataSchema:
    if isinstance(data, DataSchema):
        return data
    if not isinstance(data, dict):
        raise ValidationError("Schema must be an object", field=field)
    return DataSchema.from_dict(data)


def build_field_mapping(data: FieldMapping | dict[str, Any]) -> FieldMapping:
    if isinstance(data, FieldMapping):
        return data
    if not isinstance(data, dict):
        raise ValidationError("Field mapping must be an object", field="field_mapping")
    return FieldMapping.from_dict(data)


def build_schedule(data: SyncSchedule | dict[str, Any]) -> SyncSchedule:
    if isinstance(data, SyncSchedule):
        return data
    if not isinstance(data, dict):
        raise ValidationError("Schedule must be an object", field="schedule")
    return SyncSchedule.from_dict(data)
