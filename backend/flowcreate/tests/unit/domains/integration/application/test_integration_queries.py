"""
Test cases for the integration read side.

Covers single lookups, listing and search with paging, per-user
statistics, health, upcoming sync jobs and the static catalog.
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from flowcreate.modules.integration.application.commands import (
    ExecuteIntegrationCommand,
    PauseIntegrationCommand,
    RunSyncJobCommand,
    SetSyncJobEnabledCommand,
)
from flowcreate.modules.integration.application.queries import (
    GetAvailableIntegrationTypesQuery,
    GetIntegrationHealthQuery,
    GetIntegrationQuery,
    GetIntegrationsByUserQuery,
    GetIntegrationStatsQuery,
    GetIntegrationTemplatesQuery,
    GetUpcomingSyncJobsQuery,
    SearchIntegrationsQuery,
)
from flowcreate.modules.integration.domain.interfaces.services import TransportResponse


@pytest.mark.unit
class TestGetIntegration:
    """Test single integration lookups."""

    @pytest.mark.asyncio
    async def test_get_own_integration(self, module, owner_id, create_integration):
        """Test the owner receives the full DTO."""
        integration = await create_integration(tags=["CRM"])

        result = await module.query_bus.execute(GetIntegrationQuery(integration.id, owner_id))

        assert result.success
        assert result.data.name == "CRM Contacts"
        assert result.data.status == "active"
        assert result.data.tags == ["crm"]
        assert result.data.config["auth"]["secret_ref"] != "crm-api-key"

    @pytest.mark.asyncio
    async def test_other_user(self, module, other_owner_id, create_integration):
        """Test integrations of other users are not readable."""
        integration = await create_integration()

        result = await module.query_bus.execute(
            GetIntegrationQuery(integration.id, other_owner_id)
        )

        assert result.error_code == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_missing_integration(self, module, owner_id):
        """Test unknown ids are reported as not found."""
        result = await module.query_bus.execute(GetIntegrationQuery(uuid4(), owner_id))

        assert result.error_code == "INTEGRATION_NOT_FOUND"


@pytest.mark.unit
class TestGetIntegrationsByUser:
    """Test listing a user's integrations."""

    @pytest.mark.asyncio
    async def test_newest_first_with_paging(self, module, owner_id, create_integration):
        """Test pages are cut from the newest-first ordering."""
        # Arrange
        for index in range(3):
            await create_integration(name=f"Integration {index}")

        # Act
        first_page = await module.query_bus.execute(
            GetIntegrationsByUserQuery(owner_id, limit=2)
        )
        second_page = await module.query_bus.execute(
            GetIntegrationsByUserQuery(owner_id, limit=2, offset=2)
        )

        # Assert
        assert [i.name for i in first_page.data] == ["Integration 2", "Integration 1"]
        assert first_page.total_count == 3
        assert first_page.has_next
        assert [i.name for i in second_page.data] == ["Integration 0"]
        assert not second_page.has_next

    @pytest.mark.asyncio
    async def test_default_page_size(self, module, owner_id, create_integration):
        """Test the configured page size applies when no limit is given."""
        for index in range(12):
            await create_integration(name=f"Integration {index}", activate=False)

        result = await module.query_bus.execute(GetIntegrationsByUserQuery(owner_id))

        assert len(result.data) == 10
        assert result.limit == 10
        assert result.total_count == 12

    @pytest.mark.asyncio
    async def test_filters(self, module, owner_id, other_owner_id, create_integration):
        """Test status and tag filters narrow the owner's integrations."""
        active = await create_integration(name="Active", tags=["crm", "sales"])
        await create_integration(name="Draft", activate=False, tags=["crm"])
        await create_integration(name="Foreign", owner=other_owner_id, tags=["crm", "sales"])

        by_status = await module.query_bus.execute(
            GetIntegrationsByUserQuery(owner_id, status="active")
        )
        by_tags = await module.query_bus.execute(
            GetIntegrationsByUserQuery(owner_id, tags=["Sales", "crm"])
        )

        assert [i.id for i in by_status.data] == [active.id]
        assert [i.id for i in by_tags.data] == [active.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"limit": 0}, "limit must be between 1 and 100"),
            ({"limit": 101}, "limit must be between 1 and 100"),
            ({"offset": -1}, "offset cannot be negative"),
            ({"status": "sleeping"}, "Unknown integration status 'sleeping'"),
        ],
    )
    async def test_invalid_request(self, module, owner_id, kwargs, message):
        """Test paging and filter values are validated."""
        result = await module.query_bus.execute(GetIntegrationsByUserQuery(owner_id, **kwargs))

        assert result.error_code == "VALIDATION_ERROR"
        assert message in result.error_message


@pytest.mark.unit
class TestSearchIntegrations:
    """Test integration search."""

    @pytest.mark.asyncio
    async def test_term_matches_name_description_and_tags(
        self, module, owner_id, create_integration
    ):
        """Test the term is matched case-insensitively across text fields."""
        by_name = await create_integration(name="Contacts Import")
        by_description = await create_integration(
            name="Nightly", description="Copies CONTACTS to the warehouse"
        )
        by_tag = await create_integration(name="Tagged", tags=["contacts-v2"])
        await create_integration(name="Orders")

        result = await module.query_bus.execute(
            SearchIntegrationsQuery(owner_id, term="contacts", sort_by="name", sort_order="asc")
        )

        assert [i.id for i in result.data] == [by_name.id, by_description.id, by_tag.id]
        assert result.total_count == 3

    @pytest.mark.asyncio
    async def test_sort_by_last_run(self, module, owner_id, create_integration, clock):
        """Test the most recently executed come first and never-run ones last."""
        # Arrange
        older = await create_integration(name="Older run")
        newer = await create_integration(name="Newer run")
        never = await create_integration(name="Never run")
        await module.command_bus.execute(ExecuteIntegrationCommand(older.id, owner_id))
        clock.advance(timedelta(minutes=5))
        await module.command_bus.execute(ExecuteIntegrationCommand(newer.id, owner_id))

        # Act
        descending = await module.query_bus.execute(
            SearchIntegrationsQuery(owner_id, sort_by="last_run")
        )
        ascending = await module.query_bus.execute(
            SearchIntegrationsQuery(owner_id, sort_by="last_run", sort_order="asc")
        )

        # Assert
        assert [i.id for i in descending.data] == [newer.id, older.id, never.id]
        assert [i.id for i in ascending.data] == [older.id, newer.id, never.id]

    @pytest.mark.asyncio
    async def test_created_range(self, module, owner_id, create_integration, clock):
        """Test the creation window bounds the results."""
        await create_integration()

        inside = await module.query_bus.execute(
            SearchIntegrationsQuery(
                owner_id,
                created_after=clock() - timedelta(days=1),
                created_before=clock() + timedelta(days=1),
            )
        )
        outside = await module.query_bus.execute(
            SearchIntegrationsQuery(owner_id, created_after=clock() + timedelta(days=1))
        )

        assert inside.total_count == 1
        assert outside.total_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"sort_by": "owner"}, "sort_by must be one of"),
            ({"sort_order": "sideways"}, "sort_order must be asc or desc"),
        ],
    )
    async def test_invalid_sort(self, module, owner_id, kwargs, message):
        """Test sort parameters are validated before searching."""
        result = await module.query_bus.execute(SearchIntegrationsQuery(owner_id, **kwargs))

        assert result.error_code == "VALIDATION_ERROR"
        assert message in result.error_message

    @pytest.mark.asyncio
    async def test_inverted_date_range(self, module, owner_id, clock):
        """Test created_after may not follow created_before."""
        result = await module.query_bus.execute(
            SearchIntegrationsQuery(
                owner_id, created_after=clock(), created_before=clock() - timedelta(days=1)
            )
        )

        assert result.error_code == "VALIDATION_ERROR"


@pytest.mark.unit
class TestGetIntegrationStats:
    """Test per-user statistics."""

    @pytest.mark.asyncio
    async def test_totals_and_trends(
        self, module, owner_id, other_owner_id, create_integration, transport, clock
    ):
        """Test status counts, execution totals and period trends."""
        # Arrange
        first = await create_integration(name="First")
        second = await create_integration(name="Second")
        await create_integration(name="Draft", activate=False)
        await create_integration(name="Foreign", owner=other_owner_id)
        await module.command_bus.execute(PauseIntegrationCommand(second.id, owner_id))
        transport.queue(TransportResponse(status_code=500))
        await module.command_bus.execute(ExecuteIntegrationCommand(first.id, owner_id))
        await module.command_bus.execute(ExecuteIntegrationCommand(first.id, owner_id))
        clock.advance(timedelta(minutes=1))

        # Act
        result = await module.query_bus.execute(GetIntegrationStatsQuery(owner_id))

        # Assert
        stats = result.data
        assert stats.period == "week"
        assert stats.period_end == clock()
        assert stats.period_start == clock() - timedelta(days=7)
        assert stats.total_integrations == 3
        assert stats.active_integrations == 1
        assert stats.paused_integrations == 1
        assert stats.draft_integrations == 1
        assert stats.archived_integrations == 0
        assert stats.total_executions == 2
        assert stats.successful_executions == 1
        assert stats.failed_executions == 1
        assert stats.success_rate == 0.5
        assert stats.trends["integrations_created"] == {
            "current": 3,
            "previous": 0,
            "change_percentage": 100.0,
        }
        assert stats.trends["integrations_executed"]["current"] == 1

    @pytest.mark.asyncio
    async def test_no_integrations(self, module, owner_id):
        """Test an empty account reports zeros and no success rate."""
        result = await module.query_bus.execute(GetIntegrationStatsQuery(owner_id, "day"))

        assert result.data.total_integrations == 0
        assert result.data.success_rate is None
        assert result.data.trends["integrations_created"]["change_percentage"] == 0.0

    @pytest.mark.asyncio
    async def test_unknown_period(self, module, owner_id):
        """Test the period is validated."""
        result = await module.query_bus.execute(GetIntegrationStatsQuery(owner_id, "decade"))

        assert result.error_code == "VALIDATION_ERROR"
        assert "period must be one of" in result.error_message


@pytest.mark.unit
class TestGetIntegrationHealth:
    """Test health assessment through the query bus."""

    @pytest.mark.asyncio
    async def test_fresh_integration_is_healthy(self, module, owner_id, create_integration):
        """Test an integration without history scores full marks."""
        integration = await create_integration()

        result = await module.query_bus.execute(
            GetIntegrationHealthQuery(integration.id, owner_id)
        )

        assert result.data.is_healthy
        assert result.data.score == 100
        assert result.data.issues == []
        assert result.data.integration_name == "CRM Contacts"

    @pytest.mark.asyncio
    async def test_failures_degrade_health(
        self, module, owner_id, create_integration, transport, clock
    ):
        """Test a failing integration is flagged with a recommendation."""
        integration = await create_integration()
        transport.queue(TransportResponse(status_code=500))
        await module.command_bus.execute(ExecuteIntegrationCommand(integration.id, owner_id))

        result = await module.query_bus.execute(
            GetIntegrationHealthQuery(integration.id, owner_id)
        )

        assert result.data.status == "warning"
        assert result.data.score == 60
        assert result.data.issues == ["Low success rate: 0%"]
        assert result.data.assessed_at == clock()

    @pytest.mark.asyncio
    async def test_paused_integration_is_noted(self, module, owner_id, create_integration):
        """Test pausing is reported as an issue without costing points."""
        integration = await create_integration()
        await module.command_bus.execute(PauseIntegrationCommand(integration.id, owner_id))

        result = await module.query_bus.execute(
            GetIntegrationHealthQuery(integration.id, owner_id)
        )

        assert result.data.score == 100
        assert result.data.issues == ["Integration is paused"]


@pytest.mark.unit
class TestGetUpcomingSyncJobs:
    """Test the upcoming sync job listing."""

    @pytest.mark.asyncio
    async def test_due_jobs_within_horizon(
        self, module, owner_id, create_integration, create_sync_job, clock
    ):
        """Test only enabled jobs due inside the horizon are listed, soonest first."""
        # Arrange
        integration = await create_integration()
        due_now = await create_sync_job(integration.id, name="Due now")
        later = await create_sync_job(
            integration.id,
            name="Every two hours",
            direction="push",
            schedule={"type": "interval", "interval_ms": 7_200_000},
        )
        disabled = await create_sync_job(integration.id, name="Disabled")
        await module.command_bus.execute(
            RunSyncJobCommand(later.id, owner_id, records=[{"id": "1"}])
        )
        await module.command_bus.execute(SetSyncJobEnabledCommand(disabled.id, owner_id, False))

        # Act
        one_hour = await module.query_bus.execute(GetUpcomingSyncJobsQuery(owner_id, 1))
        three_hours = await module.query_bus.execute(GetUpcomingSyncJobsQuery(owner_id, 3))

        # Assert
        assert [item.job.id for item in one_hour.data] == [due_now.id]
        assert [item.job.id for item in three_hours.data] == [due_now.id, later.id]
        assert three_hours.data[1].next_run_at == clock() + timedelta(hours=2)
        assert three_hours.data[0].integration.name == "CRM Contacts"

    @pytest.mark.asyncio
    async def test_jobs_of_missing_integrations_are_skipped(
        self, module, owner_id, create_integration, create_sync_job
    ):
        """Test dangling jobs are left out of the listing."""
        integration = await create_integration()
        await create_sync_job(integration.id)
        await module.integration_repository.delete(integration.id)

        result = await module.query_bus.execute(GetUpcomingSyncJobsQuery(owner_id))

        assert result.success
        assert result.data == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("hours_ahead", [0, 721])
    async def test_horizon_bounds(self, module, owner_id, hours_ahead):
        """Test the horizon must be between one hour and thirty days."""
        result = await module.query_bus.execute(
            GetUpcomingSyncJobsQuery(owner_id, hours_ahead)
        )

        assert result.error_code == "VALIDATION_ERROR"


@pytest.mark.unit
class TestCatalogQueries:
    """Test the integration type and template catalog."""

    @pytest.mark.asyncio
    async def test_available_types(self, module):
        """Test every integration type is described."""
        result = await module.query_bus.execute(GetAvailableIntegrationTypesQuery())

        assert [item["type"] for item in result.data] == ["api", "database", "file", "email"]

    @pytest.mark.asyncio
    async def test_templates(self, module):
        """Test templates can be filtered by type and category."""
        everything = await module.query_bus.execute(GetIntegrationTemplatesQuery())
        email = await module.query_bus.execute(GetIntegrationTemplatesQuery("email"))
        crm = await module.query_bus.execute(GetIntegrationTemplatesQuery(category="crm"))

        assert [t["id"] for t in everything.data] == ["salesforce_contacts", "gmail_automation"]
        assert [t["id"] for t in email.data] == ["gmail_automation"]
        assert [t["id"] for t in crm.data] == ["salesforce_contacts"]

    @pytest.mark.asyncio
    async def test_unknown_template_type(self, module):
        """Test unknown types are rejected rather than matching nothing."""
        result = await module.query_bus.execute(GetIntegrationTemplatesQuery("ftp"))

        assert result.error_code == "VALIDATION_ERROR"
