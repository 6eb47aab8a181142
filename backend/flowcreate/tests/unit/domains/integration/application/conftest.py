"""Fixtures driving the integration module through its buses."""

from collections.abc import Awaitable, Callable
from typing import Any
from uuid import UUID

import pytest

from flowcreate.modules.integration.application.commands import (
    ActivateIntegrationCommand,
    CreateDataMappingCommand,
    CreateIntegrationCommand,
    CreateSyncJobCommand,
)
from flowcreate.modules.integration.application.dto import (
    DataMappingDTO,
    IntegrationDTO,
    SyncJobDTO,
)


@pytest.fixture
def create_integration(
    module, owner_id: UUID, integration_payload: dict[str, Any]
) -> Callable[..., Awaitable[IntegrationDTO]]:
    """Create an integration through the command bus, activated by default."""

    async def _create(
        name: str = "CRM Contacts",
        activate: bool = True,
        owner: UUID | None = None,
        config: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> IntegrationDTO:
        owner = owner or owner_id
        result = await module.command_bus.execute(
            CreateIntegrationCommand(
                owner_id=owner, name=name, config=config or integration_payload, **kwargs
            )
        )
        assert result.success, result.error_message
        if activate:
            result = await module.command_bus.execute(
                ActivateIntegrationCommand(result.data.id, owner)
            )
            assert result.success, result.error_message
        return result.data

    return _create


@pytest.fixture
def mapping_payload() -> dict[str, Any]:
    """Data mapping as it arrives from an API layer."""
    return {
        "name": "Contacts",
        "source_schema": {
            "name": "crm_contact",
            "version": "1",
            "fields": [
                {"name": "id", "type": "string", "required": True},
                {"name": "first_name", "type": "string", "required": True},
                {"name": "status", "type": "string"},
            ],
        },
        "target_schema": {
            "name": "contact",
            "version": "1",
            "fields": [
                {"name": "id", "type": "string", "required": True},
                {"name": "name", "type": "string", "required": True},
                {"name": "status", "type": "string"},
            ],
        },
        "field_mappings": [
            {"source_field": "id", "target_field": "id", "required": True},
            {
                "source_field": "first_name",
                "target_field": "name",
                "kind": "format",
                "config": {"format": "uppercase"},
                "required": True,
            },
        ],
    }


@pytest.fixture
def create_mapping(
    module, owner_id: UUID, mapping_payload: dict[str, Any]
) -> Callable[..., Awaitable[DataMappingDTO]]:
    async def _create(integration_id: UUID, **overrides: Any) -> DataMappingDTO:
        payload = {**mapping_payload, **overrides}
        result = await module.command_bus.execute(
            CreateDataMappingCommand(
                owner_id=owner_id, integration_id=integration_id, **payload
            )
        )
        assert result.success, result.error_message
        return result.data

    return _create


@pytest.fixture
def create_sync_job(module, owner_id: UUID) -> Callable[..., Awaitable[SyncJobDTO]]:
    """Create an hourly pull job through the command bus."""

    async def _create(integration_id: UUID, **overrides: Any) -> SyncJobDTO:
        kwargs: dict[str, Any] = {
            "name": "Hourly contacts",
            "direction": "pull",
            "schedule": {"type": "interval", "interval_ms": 3_600_000},
        }
        kwargs.update(overrides)
        result = await module.command_bus.execute(
            CreateSyncJobCommand(owner_id=owner_id, integration_id=integration_id, **kwargs)
        )
        assert result.success, result.error_message
        return result.data

    return _create
