"""
Test cases for IntegrationExecutionService.

Tests readiness validation, execution against a scripted transport,
failure classification and metrics bookkeeping.
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from flowcreate.modules.integration.domain.enums import (
    AuthType,
    ExecutionErrorKind,
    HealthStatus,
    HttpMethod,
    IntegrationType,
)
from flowcreate.modules.integration.domain.errors import TransportError
from flowcreate.modules.integration.domain.interfaces.services import TransportResponse
from flowcreate.modules.integration.domain.services import (
    ExecutionContext,
    IntegrationExecutionService,
    classify_status,
)
from flowcreate.modules.integration.domain.value_objects import (
    ApiEndpoint,
    Credential,
    IntegrationConfig,
)
from flowcreate.modules.integration.infrastructure.services import StaticSecretResolver
from flowcreate.tests.fakes import SECRET_VALUE, SlowTransport, ok


@pytest.mark.unit
class TestValidateIntegration:
    """Test readiness validation."""

    def test_ready_integration(self, execution_service, make_integration):
        """Test an active, configured integration can execute."""
        result = execution_service.validate_integration(make_integration())

        assert result.is_valid
        assert result.can_execute
        assert result.errors == ()
        assert result.warnings == ()

    def test_paused_integration(self, execution_service, make_integration):
        """Test a paused integration is valid but cannot execute."""
        integration = make_integration()
        integration.pause()

        result = execution_service.validate_integration(integration)

        assert result.is_valid
        assert not result.can_execute
        assert result.errors == ("Integration is not active (status: paused)",)
        assert "Integration is paused" in result.warnings

    def test_all_problems_reported_at_once(
        self, execution_service, make_integration, clock
    ):
        """Test status, endpoint and credential problems are collected together."""
        # Arrange
        expired = Credential(
            AuthType.OAUTH, "token-ref", expires_at=clock() - timedelta(seconds=1)
        )
        integration = make_integration(
            config=IntegrationConfig(IntegrationType.API, [], expired), active=False
        )

        # Act
        result = execution_service.validate_integration(integration)

        # Assert
        assert not result.is_valid
        assert not result.can_execute
        assert result.errors == (
            "Integration is not active (status: draft)",
            "Integration has no configured endpoints",
            "Authentication credentials have expired",
        )
        assert result.warnings == ("No rate limits configured",)

    def test_credential_expiring_soon_warns(
        self, execution_service, make_integration, endpoint, clock
    ):
        """Test credentials inside the refresh window produce a warning."""
        soon = Credential(
            AuthType.OAUTH, "token-ref", expires_at=clock() + timedelta(minutes=2)
        )
        integration = make_integration(
            config=IntegrationConfig(IntegrationType.API, [endpoint], soon)
        )

        result = execution_service.validate_integration(integration)

        assert result.can_execute
        assert "Authentication credentials expire soon" in result.warnings


@pytest.mark.unit
class TestExecuteIntegration:
    """Test integration execution."""

    @pytest.mark.asyncio
    async def test_successful_execution(
        self, execution_service, make_integration, transport
    ):
        """Test a successful call returns the body and records one success."""
        # Arrange
        integration = make_integration()
        transport.queue(ok({"contacts": 3}))
        context = ExecutionContext(payload={"since": "2024-01-01"}, headers={"X-Trace": "1"})

        # Act
        result = await execution_service.execute_integration(integration, context)

        # Assert
        assert result.success
        assert result.response_data == {"contacts": 3}
        assert result.transformed_data is None
        assert result.requests_count == 1
        assert result.errors == ()
        assert result.execution_id == context.execution_id
        assert result.metrics.bytes_transferred == 64
        assert integration.metrics.total_requests == 1
        assert integration.metrics.successful_requests == 1

        call = transport.calls[0]
        assert call["auth_headers"] == {"X-API-Key": SECRET_VALUE}
        assert call["payload"] == {"since": "2024-01-01"}
        assert call["headers"] == {"X-Trace": "1"}
        assert call["timeout_seconds"] == 0.5

    @pytest.mark.asyncio
    async def test_non_active_integration_is_not_called(
        self, execution_service, make_integration, transport
    ):
        """Test precondition failures skip the transport and leave metrics alone."""
        integration = make_integration(active=False)

        result = await execution_service.execute_integration(integration)

        assert not result.success
        assert result.error_kind == ExecutionErrorKind.PRECONDITION
        assert "Integration is not active (status: draft)" in result.error_message
        assert result.duration_ms == 0.0
        assert transport.calls == []
        assert integration.metrics.total_requests == 0

    @pytest.mark.asyncio
    async def test_timeout(
        self, secret_resolver, engine_config, clock, make_integration, credential
    ):
        """Test a hung endpoint is abandoned after its timeout."""
        # Arrange
        slow = SlowTransport(delay_seconds=5.0)
        service = IntegrationExecutionService(
            transport=slow, secret_resolver=secret_resolver, config=engine_config, clock=clock
        )
        integration = make_integration(
            config=IntegrationConfig(
                IntegrationType.API,
                [ApiEndpoint("https://slow.example.com", timeout_seconds=0.05)],
                credential,
            )
        )

        # Act
        result = await service.execute_integration(integration)

        # Assert
        assert not result.success
        assert result.error_kind == ExecutionErrorKind.TIMEOUT
        assert result.recoverable
        assert result.errors[0].endpoint == "https://slow.example.com"
        assert slow.calls == 1
        assert integration.metrics.total_requests == 1
        assert integration.metrics.successful_requests == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code,kind",
        [
            (401, ExecutionErrorKind.AUTHENTICATION),
            (403, ExecutionErrorKind.AUTHENTICATION),
            (429, ExecutionErrorKind.RATE_LIMIT),
            (503, ExecutionErrorKind.CONNECTION),
            (404, ExecutionErrorKind.VALIDATION),
        ],
    )
    async def test_http_failures_are_classified(
        self, execution_service, make_integration, transport, status_code, kind
    ):
        """Test unsuccessful statuses map to error kinds."""
        integration = make_integration()
        transport.queue(TransportResponse(status_code=status_code))

        result = await execution_service.execute_integration(integration)

        assert not result.success
        assert result.error_kind == kind
        assert result.error_message == f"Endpoint returned HTTP {status_code}"
        assert integration.metrics.last_error == result.error_message

    @pytest.mark.asyncio
    async def test_transport_error(self, execution_service, make_integration, transport):
        """Test network failures become connection errors."""
        integration = make_integration()
        transport.queue(TransportError("Connection refused", endpoint="https://api.example.com"))

        result = await execution_service.execute_integration(integration)

        assert result.error_kind == ExecutionErrorKind.CONNECTION
        assert result.error_message == "Connection refused"
        assert integration.metrics.failed_requests == 1

    @pytest.mark.asyncio
    async def test_transport_timeout_flag(self, execution_service, make_integration, transport):
        """Test transport-reported timeouts are classified as timeouts."""
        integration = make_integration()
        transport.queue(TransportError("Read timed out", timed_out=True))

        result = await execution_service.execute_integration(integration)

        assert result.error_kind == ExecutionErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_unresolvable_secret(
        self, transport, engine_config, clock, make_integration
    ):
        """Test secret resolution failures are authentication errors."""
        service = IntegrationExecutionService(
            transport=transport,
            secret_resolver=StaticSecretResolver({}),
            config=engine_config,
            clock=clock,
        )
        integration = make_integration()

        result = await service.execute_integration(integration)

        assert result.error_kind == ExecutionErrorKind.AUTHENTICATION
        assert result.errors[0].step == "authenticate"
        assert transport.calls == []
        assert integration.metrics.total_requests == 1

    @pytest.mark.asyncio
    async def test_endpoints_called_in_order(
        self, execution_service, make_integration, transport, credential
    ):
        """Test every endpoint is called and the last response is returned."""
        # Arrange
        integration = make_integration(
            config=IntegrationConfig(
                IntegrationType.API,
                [
                    ApiEndpoint("https://api.example.com/login", HttpMethod.POST),
                    ApiEndpoint("https://api.example.com/contacts"),
                ],
                credential,
            )
        )
        transport.queue(ok({"session": "abc"}), ok([{"id": "c-1"}]))

        # Act
        result = await execution_service.execute_integration(integration)

        # Assert
        assert result.success
        assert result.requests_count == 2
        assert result.response_data == [{"id": "c-1"}]
        assert [call["endpoint"].url for call in transport.calls] == [
            "https://api.example.com/login",
            "https://api.example.com/contacts",
        ]
        assert integration.metrics.total_requests == 1

    @pytest.mark.asyncio
    async def test_failure_stops_remaining_endpoints(
        self, execution_service, make_integration, transport, credential
    ):
        """Test a failed endpoint aborts the sequence."""
        integration = make_integration(
            config=IntegrationConfig(
                IntegrationType.API,
                [
                    ApiEndpoint("https://api.example.com/a"),
                    ApiEndpoint("https://api.example.com/b"),
                ],
                credential,
            )
        )
        transport.queue(TransportResponse(status_code=500))

        result = await execution_service.execute_integration(integration)

        assert not result.success
        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_response_transformed_through_mappings(
        self, execution_service, make_integration, make_mapping, transport
    ):
        """Test list responses are transformed record by record."""
        # Arrange
        integration = make_integration()
        mapping = make_mapping(integration.id)
        transport.queue(
            ok(
                [
                    {"id": "c-1", "first_name": "ada", "status": "A"},
                    {"id": "c-2", "first_name": "bob", "status": "I"},
                ]
            )
        )

        # Act
        result = await execution_service.execute_integration(
            integration, mappings=[mapping]
        )

        # Assert
        assert result.success
        assert result.transformed_data == [
            {"id": "c-1", "name": "ADA", "status": "active"},
            {"id": "c-2", "name": "BOB", "status": "inactive"},
        ]
        assert result.metrics.records_processed == 2

    @pytest.mark.asyncio
    async def test_later_mapping_wins_on_shared_keys(
        self,
        execution_service,
        make_integration,
        make_mapping,
        transport,
        contact_field_mappings,
    ):
        """Test mappings apply in order and later ones override earlier keys."""
        integration = make_integration()
        first = make_mapping(integration.id, name="First")
        second = make_mapping(
            integration.id,
            name="Second",
            field_mappings=[
                contact_field_mappings[0],
                contact_field_mappings[1].with_changes(config={"format": "lowercase"}),
            ],
        )
        transport.queue(ok({"id": "c-1", "first_name": "Ada"}))

        result = await execution_service.execute_integration(
            integration, mappings=[first, second]
        )

        assert result.transformed_data["name"] == "ada"
        assert result.transformed_data["status"] == "unknown"

    @pytest.mark.asyncio
    async def test_inactive_mappings_are_ignored(
        self, execution_service, make_integration, make_mapping, transport
    ):
        """Test deactivated mappings do not apply."""
        integration = make_integration()
        mapping = make_mapping(integration.id)
        mapping.deactivate()
        transport.queue(ok({"id": "c-1"}))

        result = await execution_service.execute_integration(integration, mappings=[mapping])

        assert result.success
        assert result.transformed_data is None

    @pytest.mark.asyncio
    async def test_transformation_failure(
        self, execution_service, make_integration, make_mapping, transport
    ):
        """Test a record that does not fit the mapping fails the execution."""
        integration = make_integration()
        mapping = make_mapping(integration.id)
        transport.queue(ok({"first_name": "no id"}))

        result = await execution_service.execute_integration(integration, mappings=[mapping])

        assert not result.success
        assert result.error_kind == ExecutionErrorKind.TRANSFORMATION
        assert "Required field 'id' is missing" in result.error_message
        assert result.transformed_data is None
        assert integration.metrics.failed_requests == 1

    @pytest.mark.asyncio
    async def test_transform_override(self, execution_service, make_integration, transport):
        """Test a caller-supplied transformation replaces the mappings."""
        integration = make_integration()
        transport.queue(ok({"items": [1, 2, 3]}))

        result = await execution_service.execute_integration(
            integration, transform_override=lambda body: sum(body["items"])
        )

        assert result.transformed_data == 6

    @pytest.mark.asyncio
    async def test_failing_transform_override(
        self, execution_service, make_integration, transport
    ):
        """Test override errors are reported as transformation failures."""
        integration = make_integration()
        transport.queue(ok({}))

        result = await execution_service.execute_integration(
            integration, transform_override=lambda body: body["missing"]
        )

        assert not result.success
        assert result.error_kind == ExecutionErrorKind.TRANSFORMATION
        assert result.error_message.startswith("Custom transformation failed")

    @pytest.mark.asyncio
    async def test_unexpected_fault_is_still_recorded(
        self, execution_service, make_integration, transport
    ):
        """Test unexpected exceptions propagate after being counted."""
        integration = make_integration()
        transport.queue(RuntimeError("bug"))

        with pytest.raises(RuntimeError):
            await execution_service.execute_integration(integration)

        assert integration.metrics.total_requests == 1
        assert integration.metrics.last_error == "Unexpected execution failure"


@pytest.mark.unit
class TestConnectionTest:
    """Test connectivity probes."""

    @pytest.mark.asyncio
    async def test_probe_first_endpoint(self, execution_service, make_integration, transport):
        """Test the probe calls the first endpoint without payload."""
        integration = make_integration()
        transport.queue(ok(status_code=204))

        result = await execution_service.test_integration_connection(integration)

        assert result.success
        assert result.status_code == 204
        assert transport.calls[0]["payload"] is None
        assert integration.metrics.successful_requests == 1

    @pytest.mark.asyncio
    async def test_probe_ignores_status(self, execution_service, make_integration, transport):
        """Test drafts can be probed before activation."""
        integration = make_integration(active=False)

        result = await execution_service.test_integration_connection(integration)

        assert result.success
        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_probe_failure(self, execution_service, make_integration, transport):
        """Test failed probes report the remote status."""
        integration = make_integration()
        transport.queue(TransportResponse(status_code=401))

        result = await execution_service.test_integration_connection(integration)

        assert not result.success
        assert result.status_code == 401
        assert result.error_message == "Endpoint returned HTTP 401"
        assert integration.metrics.failed_requests == 1

    @pytest.mark.asyncio
    async def test_probe_without_endpoints(
        self, execution_service, make_integration, transport, credential
    ):
        """Test integrations without endpoints fail the probe without a call."""
        integration = make_integration(
            config=IntegrationConfig(IntegrationType.API, [], credential), active=False
        )

        result = await execution_service.test_integration_connection(integration)

        assert not result.success
        assert result.error_message == "No endpoints configured for testing"
        assert transport.calls == []


@pytest.mark.unit
class TestHealthAndClassification:
    """Test health delegation and status classification."""

    @pytest.mark.parametrize(
        "status_code,kind",
        [
            (400, ExecutionErrorKind.VALIDATION),
            (401, ExecutionErrorKind.AUTHENTICATION),
            (403, ExecutionErrorKind.AUTHENTICATION),
            (422, ExecutionErrorKind.VALIDATION),
            (429, ExecutionErrorKind.RATE_LIMIT),
            (500, ExecutionErrorKind.CONNECTION),
            (504, ExecutionErrorKind.CONNECTION),
        ],
    )
    def test_classify_status(self, status_code, kind):
        """Test HTTP status classification."""
        assert classify_status(status_code) == kind

    @pytest.mark.asyncio
    async def test_health_reflects_failures(
        self, execution_service, make_integration, transport
    ):
        """Test repeated failures drive the health score down."""
        integration = make_integration()
        transport.queue(*[TransportResponse(status_code=500) for _ in range(3)])
        for _ in range(3):
            await execution_service.execute_integration(integration)

        health = execution_service.get_integration_health(integration)

        assert health.status == HealthStatus.WARNING
        assert health.score == 60
        assert "Low success rate: 0%" in health.issues

    def test_fresh_integration_is_healthy(self, execution_service, make_integration):
        """Test an unused integration starts healthy."""
        health = execution_service.get_integration_health(make_integration())

        assert health.is_healthy
        assert health.score == 100

    def test_execution_ids_are_unique(self):
        """Test each context carries its own execution id."""
        assert ExecutionContext().execution_id != ExecutionContext().execution_id
        assert ExecutionContext(owner_id=uuid4()).execution_id.startswith("exec_")
