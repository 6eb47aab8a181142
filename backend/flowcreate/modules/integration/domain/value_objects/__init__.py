"""Integration domain value objects."""

from .api_endpoint import ApiEndpoint
from .credential import Credential
from .data_schema import DataSchema, SchemaField
from .execution_result import (
    ConnectionTestResult,
    ExecutionError,
    ExecutionMetrics,
    ExecutionResult,
)
from .field_error import FieldError
from .field_mapping import FieldMapping
from .health_assessment import HealthAssessment
from .integration_config import IntegrationConfig
from .integration_metrics import IntegrationMetrics
from .rate_limit_config import RateLimitConfig
from .sync_run_summary import SyncRunSummary
from .sync_schedule import SyncSchedule
from .transform_result import TransformResult, TransformStatistics
from .validation_result import IntegrationValidationResult, MappingValidationResult

__all__ = [
    "ApiEndpoint",
    "ConnectionTestResult",
    "Credential",
    "DataSchema",
    "ExecutionError",
    "ExecutionMetrics",
    "ExecutionResult",
    "FieldError",
    "FieldMapping",
    "HealthAssessment",
    "IntegrationConfig",
    "IntegrationMetrics",
    "IntegrationValidationResult",
    "MappingValidationResult",
    "RateLimitConfig",
    "SchemaField",
    "SyncRunSummary",
    "SyncSchedule",
    "TransformResult",
    "TransformStatistics",
]
