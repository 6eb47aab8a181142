"""
End-to-end wiring test.

Builds the module with the real httpx transport over ``httpx.MockTransport``
and drives an integration from creation to execution through the buses.
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import httpx
import pytest

from flowcreate.core.config import EngineConfig
from flowcreate.modules.integration.application.commands import (
    ActivateIntegrationCommand,
    CreateIntegrationCommand,
    ExecuteIntegrationCommand,
)
from flowcreate.modules.integration.application.queries import (
    GetIntegrationMetricsQuery,
    GetIntegrationQuery,
)
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)
from flowcreate.modules.integration.domain.interfaces.services import ISecretResolver
from flowcreate.modules.integration.infrastructure.dependencies import (
    build_integration_module,
)
from flowcreate.modules.integration.infrastructure.http_clients import HttpTransport
from flowcreate.modules.integration.infrastructure.services import StaticSecretResolver
from flowcreate.tests.fakes import SECRET_REF, SECRET_VALUE


@pytest.mark.unit
class TestBuildIntegrationModule:
    """Test the wired module."""

    def test_every_handler_is_registered(self):
        module = build_integration_module(config=EngineConfig())

        assert module.command_bus.get_metrics()["registered_handlers"] == 18
        assert module.query_bus.get_metrics()["registered_handlers"] == 11
        assert isinstance(module.transport, HttpTransport)

    @pytest.mark.asyncio
    async def test_create_activate_execute_over_http(self, owner_id, integration_payload):
        """Test a request reaches the endpoint with resolved credentials."""
        # Arrange
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=[{"id": "c-1"}])

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        module = build_integration_module(
            config=EngineConfig(),
            transport=HttpTransport(client=client),
            secret_resolver=StaticSecretResolver({SECRET_REF: SECRET_VALUE}),
        )

        # Act
        created = await module.command_bus.execute(
            CreateIntegrationCommand(owner_id, "CRM Contacts", integration_payload)
        )
        integration_id = created.data.id
        activated = await module.command_bus.execute(
            ActivateIntegrationCommand(integration_id, owner_id)
        )
        executed = await module.command_bus.execute(
            ExecuteIntegrationCommand(integration_id, owner_id)
        )
        metrics = await module.query_bus.execute(
            GetIntegrationMetricsQuery(integration_id, owner_id)
        )
        await module.close()

        # Assert
        assert activated.success
        assert executed.success, executed.error_message
        assert executed.data.response_data == [{"id": "c-1"}]
        assert str(requests[0].url) == "https://api.example.com/v1/contacts"
        assert requests[0].headers["X-API-Key"] == SECRET_VALUE
        assert metrics.data.successful_requests == 1
        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_storage_failure_becomes_internal_error(self, owner_id):
        """Test unexpected repository faults surface as a generic envelope."""
        repository = AsyncMock(spec=IIntegrationRepository)
        repository.get_by_id.side_effect = ConnectionError("database unavailable")
        module = build_integration_module(
            config=EngineConfig(), integration_repository=repository
        )

        result = await module.query_bus.execute(GetIntegrationQuery(uuid4(), owner_id))

        assert not result.success
        assert result.error_code == "INTERNAL_ERROR"
        assert "database" not in result.error_message
        repository.get_by_id.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_secret_resolver_is_consulted_per_execution(
        self, owner_id, integration_payload, transport
    ):
        resolver = AsyncMock(spec=ISecretResolver)
        resolver.resolve.return_value = "resolved-secret"
        module = build_integration_module(
            config=EngineConfig(), transport=transport, secret_resolver=resolver
        )
        created = await module.command_bus.execute(
            CreateIntegrationCommand(owner_id, "CRM Contacts", integration_payload)
        )
        await module.command_bus.execute(ActivateIntegrationCommand(created.data.id, owner_id))

        await module.command_bus.execute(ExecuteIntegrationCommand(created.data.id, owner_id))

        resolver.resolve.assert_awaited_with(SECRET_REF)
        assert transport.calls[-1]["auth_headers"] == {"X-API-Key": "resolved-secret"}
