"""Integration domain services."""

from .data_transformation import DataTransformationService, TransformationContext
from .expression_evaluator import ExpressionEvaluator
from .health_scoring import HealthScoringService, HealthThresholds
from .integration_execution import (
    ExecutionContext,
    IntegrationExecutionService,
    classify_status,
)
from .sync_runner import SyncJobRunner, merge_records

__all__ = [
    "DataTransformationService",
    "ExecutionContext",
    "ExpressionEvaluator",
    "HealthScoringService",
    "HealthThresholds",
    "IntegrationExecutionService",
    "SyncJobRunner",
    "TransformationContext",
    "classify_status",
    "merge_records",
]
