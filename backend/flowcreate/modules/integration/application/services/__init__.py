"""Integration application services."""

from .access import (
    ensure_owner,
    load_owned_integration,
    load_owned_mapping,
    load_owned_sync_job,
)
from .catalog import available_integration_types, find_templates
from .config_factory import (
    build_credential,
    build_field_mapping,
    build_integration_config,
    build_schedule,
    build_schema,
)
from .integration_filters import (
    IntegrationFilters,
    paginate,
    sort_integrations,
    validate_page,
)

__all__ = [
    "IntegrationFilters",
    "available_integration_types",
    "build_credential",
    "build_field_mapping",
    "build_integration_config",
    "build_schedule",
    "build_schema",
    "ensure_owner",
    "find_templates",
    "load_owned_integration",
    "load_owned_mapping",
    "load_owned_sync_job",
    "paginate",
    "sort_integrations",
    "validate_page",
]
