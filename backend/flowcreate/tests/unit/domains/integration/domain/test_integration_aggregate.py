"""
Test cases for Integration aggregate.

Tests lifecycle transitions, readiness validation, metrics recording and
configuration changes.
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from flowcreate.core.errors import PreconditionFailedError, ValidationError
from flowcreate.modules.integration.domain.aggregates import Integration
from flowcreate.modules.integration.domain.enums import (
    AuthType,
    IntegrationStatus,
    IntegrationType,
)
from flowcreate.modules.integration.domain.errors import InvalidStatusTransitionError
from flowcreate.modules.integration.domain.events import (
    IntegrationCreated,
    IntegrationCredentialsRefreshed,
    IntegrationExecuted,
    IntegrationStatusChanged,
)
from flowcreate.modules.integration.domain.value_objects import (
    Credential,
    IntegrationConfig,
)


@pytest.mark.unit
class TestIntegrationCreation:
    """Test integration creation and validation."""

    def test_create_integration(self, owner_id, integration_config):
        """Test new integrations start as drafts with empty metrics."""
        # Act
        integration = Integration(
            name="  CRM Contacts  ",
            owner_id=owner_id,
            config=integration_config,
            description="Contacts from the CRM",
            tags=["CRM", " sales ", "crm", ""],
        )

        # Assert
        assert integration.name == "CRM Contacts"
        assert integration.status == IntegrationStatus.DRAFT
        assert integration.integration_type == IntegrationType.API
        assert integration.tags == {"crm", "sales"}
        assert integration.metrics.total_requests == 0
        assert integration.is_owned_by(owner_id)

        events = integration.get_events()
        assert len(events) == 1
        assert isinstance(events[0], IntegrationCreated)
        assert events[0].integration_id == integration.id

    @pytest.mark.parametrize("name", ["", "   ", "x" * 101])
    def test_invalid_name(self, owner_id, integration_config, name):
        """Test name must be non-blank and at most 100 characters."""
        with pytest.raises(ValidationError) as exc_info:
            Integration(name=name, owner_id=owner_id, config=integration_config)

        assert "name" in exc_info.value.field_errors

    def test_config_type_is_checked(self, owner_id):
        """Test config must be an IntegrationConfig."""
        with pytest.raises(ValidationError):
            Integration(name="Bad", owner_id=owner_id, config={"type": "api"})


@pytest.mark.unit
class TestIntegrationLifecycle:
    """Test status transitions."""

    def test_activate_draft(self, make_integration, clock):
        """Test a ready draft activates and emits a status change."""
        # Arrange
        integration = make_integration(active=False)
        version = integration.version

        # Act
        integration.activate(clock())

        # Assert
        assert integration.status == IntegrationStatus.ACTIVE
        assert integration.version == version + 1
        event = integration.get_events()[-1]
        assert isinstance(event, IntegrationStatusChanged)
        assert event.old_status == IntegrationStatus.DRAFT
        assert event.new_status == IntegrationStatus.ACTIVE

    def test_activate_is_idempotent_when_active(self, make_integration, clock):
        """Test activating an active integration changes nothing."""
        integration = make_integration()

        integration.activate(clock())

        assert integration.is_active
        assert integration.get_events() == []

    def test_activate_without_endpoints(self, make_integration, credential, clock):
        """Test activation requires at least one endpoint."""
        # Arrange
        integration = make_integration(
            config=IntegrationConfig(IntegrationType.API, [], credential),
            active=False,
        )

        # Act & Assert
        with pytest.raises(ValidationError) as exc_info:
            integration.activate(clock())

        assert exc_info.value.field_errors == {
            "config.endpoints": ["Integration has no configured endpoints"]
        }
        assert integration.status == IntegrationStatus.DRAFT

    def test_activate_with_expired_credential(self, make_integration, endpoint, clock):
        """Test activation refuses expired credentials and reports every problem."""
        # Arrange
        expired = Credential(
            AuthType.OAUTH, "token-ref", expires_at=clock() - timedelta(minutes=1)
        )
        integration = make_integration(
            config=IntegrationConfig(IntegrationType.API, [], expired),
            active=False,
        )

        # Act & Assert
        with pytest.raises(ValidationError) as exc_info:
            integration.activate(clock())

        assert set(exc_info.value.field_errors) == {"config.endpoints", "config.auth"}
        assert exc_info.value.field_errors["config.auth"] == [
            "Authentication credentials have expired"
        ]

    def test_pause_and_resume(self, make_integration, clock):
        """Test active -> paused -> active."""
        integration = make_integration()

        integration.pause()
        assert integration.status == IntegrationStatus.PAUSED

        integration.resume(clock())
        assert integration.status == IntegrationStatus.ACTIVE

    def test_pause_requires_active(self, make_integration):
        """Test drafts cannot be paused."""
        integration = make_integration(active=False)

        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            integration.pause()

        assert exc_info.value.code == "INVALID_STATUS_TRANSITION"

    def test_resume_requires_paused(self, make_integration, clock):
        """Test only paused integrations resume."""
        integration = make_integration()

        with pytest.raises(InvalidStatusTransitionError):
            integration.resume(clock())

    def test_resume_rechecks_credentials(self, make_integration, endpoint, clock):
        """Test resume fails when the credential expired while paused."""
        # Arrange
        credential = Credential(
            AuthType.OAUTH, "token-ref", expires_at=clock() + timedelta(hours=1)
        )
        integration = make_integration(
            config=IntegrationConfig(IntegrationType.API, [endpoint], credential)
        )
        integration.pause()

        # Act & Assert
        with pytest.raises(ValidationError):
            integration.resume(clock() + timedelta(hours=2))
        assert integration.status == IntegrationStatus.PAUSED

    def test_archive_is_terminal(self, make_integration, clock):
        """Test archived integrations accept no further transitions."""
        # Arrange
        integration = make_integration()
        integration.archive()

        # Act & Assert
        assert integration.is_archived
        with pytest.raises(InvalidStatusTransitionError):
            integration.archive()
        with pytest.raises(InvalidStatusTransitionError):
            integration.activate(clock())
        with pytest.raises(InvalidStatusTransitionError):
            integration.update_details(name="Renamed")

    def test_archive_from_draft(self, make_integration):
        """Test drafts can be archived directly."""
        integration = make_integration(active=False)

        integration.archive()

        assert integration.status == IntegrationStatus.ARCHIVED


@pytest.mark.unit
class TestIntegrationExecutionRecording:
    """Test executability and metrics recording."""

    @pytest.mark.parametrize("action", ["draft", "pause", "archive"])
    def test_ensure_executable_requires_active(self, make_integration, action):
        """Test non-active integrations refuse execution."""
        # Arrange
        integration = make_integration(active=action != "draft")
        if action == "pause":
            integration.pause()
        elif action == "archive":
            integration.archive()

        # Act & Assert
        with pytest.raises(PreconditionFailedError) as exc_info:
            integration.ensure_executable()

        assert exc_info.value.code == "PRECONDITION_FAILED"

    def test_record_execution_updates_metrics(self, make_integration, clock):
        """Test recorded outcomes accumulate into the snapshot."""
        # Arrange
        integration = make_integration()

        # Act
        integration.record_execution(True, 100.0, clock())
        metrics = integration.record_execution(False, 300.0, clock(), "Timeout")

        # Assert
        assert metrics is integration.metrics
        assert metrics.total_requests == 2
        assert metrics.successful_requests == 1
        assert metrics.average_response_time_ms == pytest.approx(200.0)
        assert metrics.last_error == "Timeout"

        events = integration.get_events()
        assert [type(e) for e in events] == [IntegrationExecuted, IntegrationExecuted]
        assert events[1].success is False

    def test_negative_duration_rejected(self, make_integration):
        """Test durations cannot be negative."""
        integration = make_integration()

        with pytest.raises(ValidationError):
            integration.record_execution(True, -1.0)

        assert integration.metrics.total_requests == 0


@pytest.mark.unit
class TestIntegrationChanges:
    """Test detail, configuration and credential changes."""

    def test_update_details(self, make_integration):
        """Test partial detail updates."""
        integration = make_integration(description="old")

        integration.update_details(name="Renamed", tags=["New"])

        assert integration.name == "Renamed"
        assert integration.description == "old"
        assert integration.tags == {"new"}

    def test_update_config_keeps_active_integrations_callable(
        self, make_integration, credential
    ):
        """Test an active integration cannot drop all endpoints."""
        integration = make_integration()

        with pytest.raises(ValidationError, match="no configured endpoints"):
            integration.update_config(IntegrationConfig(IntegrationType.API, [], credential))

    def test_update_config_on_draft(self, make_integration, credential):
        """Test drafts may hold an incomplete configuration."""
        integration = make_integration(active=False)
        version = integration.version

        integration.update_config(IntegrationConfig(IntegrationType.FILE, [], credential))

        assert integration.integration_type == IntegrationType.FILE
        assert integration.version == version + 1

    def test_refresh_credentials(self, make_integration, clock):
        """Test credential replacement keeps endpoints and emits an event."""
        # Arrange
        integration = make_integration()
        endpoints = integration.config.endpoints
        new_credential = Credential(
            AuthType.OAUTH, "new-token", expires_at=clock() + timedelta(days=30)
        )

        # Act
        integration.refresh_credentials(new_credential)

        # Assert
        assert integration.credential == new_credential
        assert integration.config.endpoints == endpoints
        assert isinstance(integration.get_events()[-1], IntegrationCredentialsRefreshed)

    def test_clone(self, make_integration):
        """Test clones are fresh drafts with the same configuration."""
        # Arrange
        integration = make_integration(tags=["crm"])
        integration.record_execution(True, 10.0)
        new_owner = uuid4()

        # Act
        clone = integration.clone(owner_id=new_owner)

        # Assert
        assert clone.id != integration.id
        assert clone.name == "CRM Contacts (Copy)"
        assert clone.status == IntegrationStatus.DRAFT
        assert clone.config == integration.config
        assert clone.tags == {"crm"}
        assert clone.owner_id == new_owner
        assert clone.metrics.total_requests == 0

    def test_clone_name_is_truncated(self, make_integration):
        """Test the generated clone name respects the name limit."""
        integration = make_integration(name="n" * 100)

        assert len(integration.clone().name) == 100

    @pytest.mark.parametrize(
        "term,expected",
        [("crm", True), ("CONTACT", True), ("sales", True), ("billing", False), ("", True)],
    )
    def test_matches_term(self, make_integration, term, expected):
        """Test search over name, description and tags."""
        integration = make_integration(description="Pulls contacts", tags=["Sales"])

        assert integration.matches_term(term) is expected

    def test_to_dict_masks_secret_reference(self, make_integration):
        """Test serialization never exposes the secret reference."""
        data = make_integration().to_dict()

        assert data["status"] == "active"
        assert data["config"]["auth"]["secret_ref"] == "cr****ey"
