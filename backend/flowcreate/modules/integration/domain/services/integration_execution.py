"""Integration execution service.

Validates readiness, performs calls through the injected transport, records
the outcome on the aggregate and derives health. Callers are expected to hold
the aggregate lock of the integration while executing so that concurrent
executions of the same integration do not race on its metrics.
"""

import asyncio
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

from flowcreate.core.config import EngineConfig
from flowcreate.core.domain.base import DomainService, utc_now
from flowcreate.core.errors import FlowCreateError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.domain.aggregates import DataMapping, Integration
from flowcreate.modules.integration.domain.enums import (
    ExecutionErrorKind,
    ExecutionTrigger,
    IntegrationStatus,
)
from flowcreate.modules.integration.domain.errors import TransportError
from flowcreate.modules.integration.domain.interfaces.services import (
    ISecretResolver,
    ITransport,
    TransportResponse,
)
from flowcreate.modules.integration.domain.services.data_transformation import (
    DataTransformationService,
    TransformationContext,
)
from flowcreate.modules.integration.domain.services.health_scoring import (
    HealthScoringService,
    HealthThresholds,
)
from flowcreate.modules.integration.domain.value_objects import (
    ApiEndpoint,
    ConnectionTestResult,
    ExecutionError,
    ExecutionMetrics,
    ExecutionResult,
    HealthAssessment,
    IntegrationValidationResult,
)

logger = get_logger(__name__)

NO_TEST_ENDPOINT_ERROR = "No endpoints configured for testing"

TransformOverride = Callable[[Any], Any]


@dataclass(frozen=True)
class ExecutionContext:
    """Request-scoped inputs of one execution."""

    payload: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    source_ip: str | None = None
    trigger: ExecutionTrigger = ExecutionTrigger.MANUAL
    owner_id: UUID | None = None
    execution_id: str = field(default_factory=lambda: f"exec_{uuid4().hex}")
    lookup_tables: dict[str, dict[str, Any]] = field(default_factory=dict)


class _StepFailed(Exception):
    """Carries a categorized failure out of the execution steps."""

    def __init__(
        self,
        error: ExecutionError,
        elapsed_ms: float = 0.0,
        status_code: int | None = None,
    ):
        super().__init__(error.message)
        self.error = error
        self.elapsed_ms = elapsed_ms
        self.status_code = status_code


def classify_status(status_code: int) -> ExecutionErrorKind:
    """Map an unsuccessful HTTP status to an execution error kind."""
    if status_code in (401, 403):
        return ExecutionErrorKind.AUTHENTICATION
    if status_code == 429:
        return ExecutionErrorKind.RATE_LIMIT
    if status_code >= 500:
        return ExecutionErrorKind.CONNECTION
    return ExecutionErrorKind.VALIDATION


class IntegrationExecutionService(DomainService):
    """Runs integrations against their endpoints and keeps their metrics."""

    def __init__(
        self,
        transport: ITransport,
        secret_resolver: ISecretResolver,
        transformation_service: DataTransformationService | None = None,
        health_service: HealthScoringService | None = None,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._transport = transport
        self._secret_resolver = secret_resolver
        self._transformation = transformation_service or DataTransformationService()
        self._config = config or EngineConfig()
        self._health = health_service or HealthScoringService(
            HealthThresholds(
                slow_response_ms=self._config.health_slow_response_ms,
                critical_response_ms=self._config.health_critical_response_ms,
                stale_after=timedelta(days=self._config.health_stale_after_days),
            )
        )
        self._clock = clock

    def validate_integration(
        self, integration: Integration, now: datetime | None = None
    ) -> IntegrationValidationResult:
        """Report every readiness problem of ``integration`` at once.

        ``is_valid`` covers configuration only; ``can_execute`` also needs the
        integration to be active.
        """
        now = now or self._clock()
        errors: list[str] = []
        warnings: list[str] = []

        if not integration.status.can_execute:
            errors.append(
                f"Integration is not active (status: {integration.status.value})"
            )

        configuration_errors = integration.configuration_errors(now)
        for messages in configuration_errors.values():
            errors.extend(messages)

        if integration.status == IntegrationStatus.PAUSED:
            warnings.append("Integration is paused")
        credential = integration.credential
        if not credential.is_expired(now) and credential.needs_refresh(now):
            warnings.append("Authentication credentials expire soon")
        if integration.config.rate_limits is None:
            warnings.append("No rate limits configured")

        is_valid = not configuration_errors
        return IntegrationValidationResult(
            is_valid=is_valid,
            can_execute=is_valid and integration.status.can_execute,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )

    async def execute_integration(
        self,
        integration: Integration,
        context: ExecutionContext | None = None,
        mappings: Sequence[DataMapping] | None = None,
        transform_override: TransformOverride | None = None,
    ) -> ExecutionResult:
        """Execute ``integration`` once.

        A non-executable integration yields a failed result of kind
        ``precondition`` without touching its metrics. Otherwise every endpoint
        is called in declaration order, the last response is optionally
        transformed, and exactly one execution is recorded on the aggregate,
        whatever the outcome.
        """
        context = context or ExecutionContext()
        started_at = self._clock()
        validation_start = time.perf_counter()
        validation = self.validate_integration(integration, started_at)
        validation_time_ms = (time.perf_counter() - validation_start) * 1000

        if not validation.can_execute:
            logger.info(
                "Integration execution refused",
                integration_id=str(integration.id),
                execution_id=context.execution_id,
                status=integration.status.value,
            )
            return ExecutionResult(
                execution_id=context.execution_id,
                success=False,
                started_at=started_at,
                finished_at=self._clock(),
                duration_ms=0.0,
                errors=(
                    ExecutionError(
                        ExecutionErrorKind.PRECONDITION,
                        "; ".join(validation.errors),
                        step="validate",
                    ),
                ),
                warnings=validation.warnings,
                metrics=ExecutionMetrics(validation_time_ms=validation_time_ms),
            )

        network_time_ms = 0.0
        transformation_time_ms = 0.0
        bytes_transferred = 0
        requests_count = 0
        records_processed = 0
        response_data: Any = None
        transformed_data: Any = None
        errors: list[ExecutionError] = []
        warnings = list(validation.warnings)
        success = False
        recorded = False

        try:
            try:
                auth_headers = await self._auth_headers(integration)

                for endpoint in integration.config.endpoints:
                    requests_count += 1
                    response, elapsed_ms = await self._call(
                        endpoint, auth_headers, context.payload, context.headers
                    )
                    network_time_ms += elapsed_ms
                    bytes_transferred += response.bytes_received
                    response_data = response.body

                transform_start = time.perf_counter()
                transformed_data, records_processed = self._transform_response(
                    response_data, mappings, transform_override, context
                )
                transformation_time_ms = (time.perf_counter() - transform_start) * 1000
                success = True
            except _StepFailed as e:
                errors.append(e.error)
                network_time_ms += e.elapsed_ms

            finished_at = self._clock()
            duration_ms = network_time_ms / max(requests_count, 1)
            self._record(integration, success, duration_ms, finished_at, errors)
            recorded = True
        finally:
            if not recorded:
                # unexpected fault, counted before it propagates
                self._record(
                    integration,
                    False,
                    network_time_ms / max(requests_count, 1),
                    self._clock(),
                    [
                        ExecutionError(
                            ExecutionErrorKind.CONNECTION, "Unexpected execution failure"
                        )
                    ],
                )

        result = ExecutionResult(
            execution_id=context.execution_id,
            success=success,
            started_at=started_at,
            finished_at=finished_at,
            duration_ms=duration_ms,
            requests_count=requests_count,
            response_data=response_data,
            transformed_data=transformed_data if success else None,
            errors=tuple(errors),
            warnings=tuple(warnings),
            metrics=ExecutionMetrics(
                network_time_ms=network_time_ms,
                transformation_time_ms=transformation_time_ms,
                validation_time_ms=validation_time_ms,
                bytes_transferred=bytes_transferred,
                records_processed=records_processed,
            ),
        )

        logger.info(
            "Integration executed",
            integration_id=str(integration.id),
            execution_id=context.execution_id,
            trigger=context.trigger.value,
            success=success,
            duration_ms=round(duration_ms, 3),
            requests=requests_count,
            error=result.error_message if not success else None,
        )
        return result

    async def test_integration_connection(
        self, integration: Integration
    ) -> ConnectionTestResult:
        """Probe the first endpoint without a payload.

        The probe ignores lifecycle status but is recorded like any execution.
        """
        endpoint = integration.config.primary_endpoint
        if endpoint is None:
            self._record(
                integration,
                False,
                0.0,
                self._clock(),
                [ExecutionError(ExecutionErrorKind.VALIDATION, NO_TEST_ENDPOINT_ERROR)],
            )
            return ConnectionTestResult(
                success=False, response_time_ms=0.0, error_message=NO_TEST_ENDPOINT_ERROR
            )

        elapsed_ms = 0.0
        status_code: int | None = None
        error: ExecutionError | None = None
        recorded = False
        try:
            try:
                auth_headers = await self._auth_headers(integration)
                response, elapsed_ms = await self._call(endpoint, auth_headers, None, {})
                status_code = response.status_code
            except _StepFailed as e:
                error = e.error
                elapsed_ms = e.elapsed_ms
                status_code = e.status_code

            self._record(
                integration,
                error is None,
                elapsed_ms,
                self._clock(),
                [error] if error else [],
            )
            recorded = True
        finally:
            if not recorded:
                self._record(
                    integration,
                    False,
                    elapsed_ms,
                    self._clock(),
                    [
                        ExecutionError(
                            ExecutionErrorKind.CONNECTION,
                            "Unexpected connection test failure",
                        )
                    ],
                )

        logger.info(
            "Integration connection tested",
            integration_id=str(integration.id),
            success=error is None,
            status_code=status_code,
            response_time_ms=round(elapsed_ms, 3),
        )
        return ConnectionTestResult(
            success=error is None,
            response_time_ms=elapsed_ms,
            status_code=status_code,
            error_message=error.message if error else None,
        )

    def get_integration_health(
        self, integration: Integration, now: datetime | None = None
    ) -> HealthAssessment:
        return self._health.assess(integration, now or self._clock())

    async def _auth_headers(self, integration: Integration) -> dict[str, str]:
        credential = integration.credential
        try:
            secret = await self._secret_resolver.resolve(credential.secret_ref)
        except TransportError as e:
            raise _StepFailed(
                ExecutionError(
                    ExecutionErrorKind.AUTHENTICATION, e.message, step="authenticate"
                )
            ) from e
        return credential.auth_headers(secret)

    async def _call(
        self,
        endpoint: ApiEndpoint,
        auth_headers: dict[str, str],
        payload: Any,
        headers: dict[str, str],
    ) -> tuple[TransportResponse, float]:
        """One bounded transport call; returns the response and elapsed ms."""
        timeout = endpoint.effective_timeout(self._config.transport_timeout_seconds)
        start = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self._transport.send(
                    endpoint,
                    auth_headers,
                    payload=payload,
                    headers=headers,
                    timeout_seconds=timeout,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise _StepFailed(
                ExecutionError(
                    ExecutionErrorKind.TIMEOUT,
                    f"Request timed out after {timeout:g}s",
                    step="request",
                    endpoint=endpoint.url,
                ),
                elapsed_ms=(time.perf_counter() - start) * 1000,
            ) from e
        except TransportError as e:
            if e.timed_out:
                kind = ExecutionErrorKind.TIMEOUT
            elif e.response_status is not None:
                kind = classify_status(e.response_status)
            else:
                kind = ExecutionErrorKind.CONNECTION
            raise _StepFailed(
                ExecutionError(kind, e.message, step="request", endpoint=endpoint.url),
                elapsed_ms=(time.perf_counter() - start) * 1000,
                status_code=e.response_status,
            ) from e
        except Exception as e:
            logger.exception(
                "Transport raised an unexpected error",
                endpoint=endpoint.url,
                error_type=type(e).__name__,
            )
            raise _StepFailed(
                ExecutionError(
                    ExecutionErrorKind.CONNECTION,
                    "Unexpected transport failure",
                    step="request",
                    endpoint=endpoint.url,
                ),
                elapsed_ms=(time.perf_counter() - start) * 1000,
            ) from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        if not response.is_success:
            raise _StepFailed(
                ExecutionError(
                    classify_status(response.status_code),
                    f"Endpoint returned HTTP {response.status_code}",
                    step="request",
                    endpoint=endpoint.url,
                ),
                elapsed_ms=elapsed_ms,
                status_code=response.status_code,
            )
        return response, elapsed_ms

    def _transform_response(
        self,
        response_data: Any,
        mappings: Sequence[DataMapping] | None,
        transform_override: TransformOverride | None,
        context: ExecutionContext,
    ) -> tuple[Any, int]:
        """Returns the transformed data and the number of records processed."""
        records_processed = len(response_data) if isinstance(response_data, list) else 1

        if transform_override is not None:
            try:
                return transform_override(response_data), records_processed
            except (FlowCreateError, ValueError, TypeError, KeyError) as e:
                raise _StepFailed(
                    ExecutionError(
                        ExecutionErrorKind.TRANSFORMATION,
                        f"Custom transformation failed: {e}",
                        step="transform",
                    )
                ) from e

        active = [mapping for mapping in mappings or () if mapping.is_active]
        if not active:
            return None, records_processed

        if isinstance(response_data, list):
            records = [
                self._transform_record(record, active, context) for record in response_data
            ]
            return (
                records,
                records_processed,
            )
        return self._transform_record(response_data, active, context), records_processed

    def _transform_record(
        self, record: Any, mappings: list[DataMapping], context: ExecutionContext
    ) -> dict[str, Any]:
        """Apply every active mapping; later mappings win on shared target keys."""
        merged: dict[str, Any] = {}
        for mapping in mappings:
            result = self._transformation.transform(
                mapping,
                TransformationContext(
                    source_data=record,
                    owner_id=context.owner_id,
                    execution_id=context.execution_id,
                    lookup_tables=context.lookup_tables,
                ),
            )
            if not result.success:
                raise _StepFailed(
                    ExecutionError(
                        ExecutionErrorKind.TRANSFORMATION,
                        f"Mapping '{mapping.name}' failed: "
                        + "; ".join(result.error_messages),
                        step="transform",
                    )
                )
            merged.update(result.transformed_data)
        return merged

    def _record(
        self,
        integration: Integration,
        success: bool,
        duration_ms: float,
        at: datetime,
        errors: list[ExecutionError],
    ) -> None:
        error_message = "; ".join(error.message for error in errors) or None
        integration.record_execution(success, duration_ms, at, error_message)

    def __str__(self) -> str:
        return "IntegrationExecutionService"
