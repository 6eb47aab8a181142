"""Integration configuration value object."""

from typing import Any

from flowcreate.core.domain.base import ValueObject
from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.domain.enums import IntegrationType
from flowcreate.modules.integration.domain.value_objects.api_endpoint import ApiEndpoint
from flowcreate.modules.integration.domain.value_objects.credential import Credential
from flowcreate.modules.integration.domain.value_objects.rate_limit_config import (
    RateLimitConfig,
)


class IntegrationConfig(ValueObject):
    """Connection settings of an integration.

    An empty endpoint list is representable so that readiness validation can
    report it; activation refuses it.
    """

    def __init__(
        self,
        integration_type: IntegrationType | str,
        endpoints: list[ApiEndpoint] | tuple[ApiEndpoint, ...],
        auth: Credential,
        rate_limits: RateLimitConfig | None = None,
    ):
        super().__init__()
        if not isinstance(integration_type, IntegrationType):
            try:
                integration_type = IntegrationType(integration_type)
            except ValueError as e:
                allowed = ", ".join(t.value for t in IntegrationType)
                raise ValidationError(
                    f"Invalid integration type '{integration_type}'. Must be one of: {allowed}",
                    field="type",
                ) from e
        if not isinstance(auth, Credential):
            raise ValidationError("Authentication credential is required", field="auth")

        self.integration_type = integration_type
        self.endpoints = tuple(endpoints or ())
        self.auth = auth
        self.rate_limits = rate_limits
        self._freeze()

    @property
    def has_endpoints(self) -> bool:
        return bool(self.endpoints)

    @property
    def primary_endpoint(self) -> ApiEndpoint | None:
        return self.endpoints[0] if self.endpoints else None

    def with_auth(self, auth: Credential) -> "IntegrationConfig":
        return IntegrationConfig(self.integration_type, self.endpoints, auth, self.rate_limits)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.integration_type.value,
            "endpoints": [endpoint.to_dict() for endpoint in self.endpoints],
            "auth": self.auth.to_dict(),
            "rate_limits": self.rate_limits.to_dict() if self.rate_limits else None,
        }

    def __str__(self) -> str:
        return f"{self.integration_type} config with {len(self.endpoints)} endpoint(s)"
