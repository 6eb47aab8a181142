"""
Shared pytest configuration and fixtures.

Provides:
- A scripted in-process transport standing in for external systems
- In-memory repositories and services
- A fixed clock
- Factories for integrations, mappings and sync jobs
"""

from collections.abc import Callable
from datetime import timedelta
from typing import Any
from uuid import UUID, uuid4

import pytest

from flowcreate.core.config import EngineConfig
from flowcreate.core.domain.base import utc_now
from flowcreate.modules.integration.domain.aggregates import (
    DataMapping,
    Integration,
    SyncJob,
)
from flowcreate.modules.integration.domain.enums import (
    AuthType,
    ConflictResolution,
    FieldType,
    HttpMethod,
    IntegrationType,
    SyncDirection,
)
from flowcreate.modules.integration.domain.services import (
    DataTransformationService,
    IntegrationExecutionService,
)
from flowcreate.modules.integration.domain.value_objects import (
    ApiEndpoint,
    Credential,
    DataSchema,
    FieldMapping,
    IntegrationConfig,
    RateLimitConfig,
    SchemaField,
    SyncSchedule,
)
from flowcreate.modules.integration.infrastructure.dependencies import (
    build_integration_module,
)
from flowcreate.modules.integration.infrastructure.repositories import (
    InMemoryDataMappingRepository,
    InMemoryIntegrationRepository,
    InMemorySyncJobRepository,
)
from flowcreate.modules.integration.infrastructure.services import (
    AggregateLockRegistry,
    InMemorySyncTargetStore,
    StaticSecretResolver,
)
from flowcreate.tests.fakes import SECRET_REF, SECRET_VALUE, FakeTransport, FixedClock


@pytest.fixture
def owner_id() -> UUID:
    """Acting user ID."""
    return uuid4()


@pytest.fixture
def other_owner_id() -> UUID:
    """A user that owns nothing."""
    return uuid4()


@pytest.fixture
def clock() -> FixedClock:
    """Fixed clock close to real time, so aggregate timestamps stay comparable."""
    return FixedClock(utc_now().replace(microsecond=0))


@pytest.fixture
def engine_config() -> EngineConfig:
    """Engine tunables with a short transport timeout."""
    return EngineConfig(transport_timeout_seconds=0.5)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def secret_resolver() -> StaticSecretResolver:
    return StaticSecretResolver({SECRET_REF: SECRET_VALUE})


@pytest.fixture
def credential() -> Credential:
    """API key credential without expiry."""
    return Credential(AuthType.API_KEY, SECRET_REF)


@pytest.fixture
def endpoint() -> ApiEndpoint:
    return ApiEndpoint("https://api.example.com/v1/contacts", HttpMethod.GET)


@pytest.fixture
def integration_config(endpoint: ApiEndpoint, credential: Credential) -> IntegrationConfig:
    return IntegrationConfig(
        IntegrationType.API,
        [endpoint],
        credential,
        RateLimitConfig(requests_per_minute=60),
    )


@pytest.fixture
def make_integration(
    owner_id: UUID, integration_config: IntegrationConfig, clock: FixedClock
) -> Callable[..., Integration]:
    """Factory for integrations, active unless told otherwise."""

    def _make(
        name: str = "CRM Contacts",
        config: IntegrationConfig | None = None,
        active: bool = True,
        tags: list[str] | None = None,
        description: str | None = None,
        owner: UUID | None = None,
    ) -> Integration:
        integration = Integration(
            name=name,
            owner_id=owner or owner_id,
            config=config or integration_config,
            description=description,
            tags=tags,
        )
        if active:
            integration.activate(clock())
        integration.clear_events()
        return integration

    return _make


@pytest.fixture
def contact_source_schema() -> DataSchema:
    return DataSchema(
        "crm_contact",
        "1",
        [
            SchemaField("id", FieldType.STRING, required=True),
            SchemaField("first_name", FieldType.STRING, required=True),
            SchemaField("email", FieldType.STRING),
            SchemaField("status", FieldType.STRING),
            SchemaField("age", FieldType.NUMBER),
        ],
    )


@pytest.fixture
def contact_target_schema() -> DataSchema:
    return DataSchema(
        "contact",
        "1",
        [
            SchemaField("id", FieldType.STRING, required=True),
            SchemaField("name", FieldType.STRING, required=True),
            SchemaField("email", FieldType.STRING),
            SchemaField("status", FieldType.STRING),
        ],
    )


@pytest.fixture
def contact_field_mappings() -> list[FieldMapping]:
    return [
        FieldMapping("id", "id", required=True, mapping_id="fm_id"),
        FieldMapping(
            "first_name",
            "name",
            kind="format",
            config={"format": "uppercase"},
            required=True,
            mapping_id="fm_name",
        ),
        FieldMapping("email", "email", mapping_id="fm_email"),
        FieldMapping(
            "status",
            "status",
            kind="lookup",
            config={"table": {"A": "active", "I": "inactive"}, "default": "unknown"},
            default_value="unknown",
            mapping_id="fm_status",
        ),
    ]


@pytest.fixture
def make_mapping(
    owner_id: UUID,
    contact_source_schema: DataSchema,
    contact_target_schema: DataSchema,
    contact_field_mappings: list[FieldMapping],
) -> Callable[..., DataMapping]:
    """Factory for a valid contact mapping."""

    def _make(
        integration_id: UUID,
        name: str = "Contacts",
        field_mappings: list[FieldMapping] | None = None,
        owner: UUID | None = None,
    ) -> DataMapping:
        mapping = DataMapping(
            owner_id=owner or owner_id,
            integration_id=integration_id,
            name=name,
            source_schema=contact_source_schema,
            target_schema=contact_target_schema,
            field_mappings=(
                contact_field_mappings if field_mappings is None else field_mappings
            ),
        )
        mapping.clear_events()
        return mapping

    return _make


@pytest.fixture
def make_sync_job(owner_id: UUID, clock: FixedClock) -> Callable[..., SyncJob]:
    """Factory for an hourly sync job."""

    def _make(
        integration_id: UUID,
        mapping_id: UUID | None = None,
        conflict_resolution: ConflictResolution = ConflictResolution.SOURCE_WINS,
        direction: SyncDirection = SyncDirection.PULL,
        batch_size: int = 100,
        schedule: SyncSchedule | None = None,
        name: str = "Hourly contacts",
    ) -> SyncJob:
        job = SyncJob(
            owner_id=owner_id,
            integration_id=integration_id,
            name=name,
            direction=direction,
            schedule=schedule or SyncSchedule.every(timedelta(hours=1)),
            conflict_resolution=conflict_resolution,
            batch_size=batch_size,
            mapping_id=mapping_id,
            now=clock(),
        )
        job.clear_events()
        return job

    return _make


@pytest.fixture
def integration_repository() -> InMemoryIntegrationRepository:
    return InMemoryIntegrationRepository()


@pytest.fixture
def mapping_repository() -> InMemoryDataMappingRepository:
    return InMemoryDataMappingRepository()


@pytest.fixture
def sync_job_repository() -> InMemorySyncJobRepository:
    return InMemorySyncJobRepository()


@pytest.fixture
def target_store() -> InMemorySyncTargetStore:
    return InMemorySyncTargetStore()


@pytest.fixture
def locks() -> AggregateLockRegistry:
    return AggregateLockRegistry()


@pytest.fixture
def transformation_service() -> DataTransformationService:
    return DataTransformationService()


@pytest.fixture
def execution_service(
    transport: FakeTransport,
    secret_resolver: StaticSecretResolver,
    transformation_service: DataTransformationService,
    engine_config: EngineConfig,
    clock: FixedClock,
) -> IntegrationExecutionService:
    return IntegrationExecutionService(
        transport=transport,
        secret_resolver=secret_resolver,
        transformation_service=transformation_service,
        config=engine_config,
        clock=clock,
    )


@pytest.fixture
def module(
    transport: FakeTransport,
    secret_resolver: StaticSecretResolver,
    engine_config: EngineConfig,
    clock: FixedClock,
):
    """Fully wired integration module on in-memory storage."""
    return build_integration_module(
        config=engine_config,
        transport=transport,
        secret_resolver=secret_resolver,
        clock=clock,
    )


@pytest.fixture
def integration_payload() -> dict[str, Any]:
    """Create-integration config as it arrives from an API layer."""
    return {
        "type": "api",
        "endpoints": [{"url": "https://api.example.com/v1/contacts", "method": "GET"}],
        "auth": {"type": "api_key", "secret_ref": SECRET_REF},
        "rate_limits": {"requests_per_minute": 60},
    }
