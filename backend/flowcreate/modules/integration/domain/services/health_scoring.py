"""Deterministic health scoring for integrations."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from flowcreate.core.domain.base import DomainService
from flowcreate.modules.integration.domain.aggregates import Integration
from flowcreate.modules.integration.domain.enums import HealthStatus, IntegrationStatus
from flowcreate.modules.integration.domain.value_objects import HealthAssessment

HEALTHY_THRESHOLD = 80
WARNING_THRESHOLD = 50

LOW_SUCCESS_RATE = 0.5
DEGRADED_SUCCESS_RATE = 0.9

LOW_SUCCESS_PENALTY = 40
DEGRADED_SUCCESS_PENALTY = 15
CRITICAL_LATENCY_PENALTY = 30
SLOW_LATENCY_PENALTY = 10
EXPIRED_CREDENTIAL_PENALTY = 50
REFRESH_DUE_PENALTY = 10
STALE_PENALTY = 15


@dataclass(frozen=True)
class HealthThresholds:
    """Latency and staleness limits used by the scorer."""

    slow_response_ms: float = 2000.0
    critical_response_ms: float = 5000.0
    stale_after: timedelta = timedelta(days=7)


class HealthScoringService(DomainService):
    """Derives a ``HealthAssessment`` from metrics, credential state and time.

    The score starts at 100 and loses points per finding:

    ========================================  =======
    finding                                   penalty
    ========================================  =======
    success rate below 50%                    40
    success rate below 90%                    15
    average response above critical limit     30
    average response above slow limit         10
    credential expired                        50
    credential refresh due                    10
    no execution within the staleness window  15
    ========================================  =======

    The score is clamped to ``[0, 100]`` and bucketed (>=80 healthy, >=50
    warning, else critical). An expired credential forces critical last.
    """

    def __init__(self, thresholds: HealthThresholds | None = None):
        self.thresholds = thresholds or HealthThresholds()

    def assess(self, integration: Integration, now: datetime) -> HealthAssessment:
        score = 100
        issues: list[str] = []
        recommendations: list[str] = []
        metrics = integration.metrics
        credential = integration.credential

        success_rate = metrics.success_rate
        if success_rate is not None:
            if success_rate < LOW_SUCCESS_RATE:
                score -= LOW_SUCCESS_PENALTY
                issues.append(f"Low success rate: {success_rate:.0%}")
                recommendations.append("Investigate failing requests and endpoint errors")
            elif success_rate < DEGRADED_SUCCESS_RATE:
                score -= DEGRADED_SUCCESS_PENALTY
                issues.append(f"Degraded success rate: {success_rate:.0%}")
                recommendations.append("Review recent failures for recurring errors")

            average = metrics.average_response_time_ms
            if average > self.thresholds.critical_response_ms:
                score -= CRITICAL_LATENCY_PENALTY
                issues.append(f"Very slow average response time: {average:.0f}ms")
                recommendations.append("Check endpoint performance or raise timeouts")
            elif average > self.thresholds.slow_response_ms:
                score -= SLOW_LATENCY_PENALTY
                issues.append(f"Slow average response time: {average:.0f}ms")
                recommendations.append("Monitor endpoint latency")

        expired = credential.is_expired(now)
        if expired:
            score -= EXPIRED_CREDENTIAL_PENALTY
            issues.append("Authentication credentials have expired")
            recommendations.append("Refresh credentials immediately")
        elif credential.needs_refresh(now):
            score -= REFRESH_DUE_PENALTY
            issues.append("Authentication credentials expire soon")
            recommendations.append("Schedule credential refresh soon")

        last_executed = metrics.last_executed_at
        if last_executed is not None and now - last_executed > self.thresholds.stale_after:
            score -= STALE_PENALTY
            issues.append(
                f"No executions in the last {self.thresholds.stale_after.days} days"
            )
            recommendations.append("Verify the integration is still in use")

        if integration.status == IntegrationStatus.PAUSED:
            issues.append("Integration is paused")
        elif integration.status == IntegrationStatus.ARCHIVED:
            issues.append("Integration is archived")

        score = max(0, min(100, score))
        if score >= HEALTHY_THRESHOLD:
            status = HealthStatus.HEALTHY
        elif score >= WARNING_THRESHOLD:
            status = HealthStatus.WARNING
        else:
            status = HealthStatus.CRITICAL

        if expired:
            status = HealthStatus.CRITICAL

        return HealthAssessment(
            status=status,
            score=score,
            issues=tuple(issues),
            recommendations=tuple(recommendations),
            assessed_at=now,
        )

    def __str__(self) -> str:
        return "HealthScoringService"
