"""Integration aggregate root for external system connections."""

from collections.abc import Iterable
from datetime import datetime
from typing import Any
from uuid import UUID

from flowcreate.core.domain.base import AggregateRoot, utc_now
from flowcreate.core.errors import PreconditionFailedError, ValidationError
from flowcreate.modules.integration.domain.enums import IntegrationStatus, IntegrationType
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
    IntegrationMetrics,
)

NO_ENDPOINTS_ERROR = "Integration has no configured endpoints"
EXPIRED_CREDENTIAL_ERROR = "Authentication credentials have expired"


class Integration(AggregateRoot):
    """Aggregate root for a configured connector to an external system.

    Lifecycle::

        draft --activate--> active --pause--> paused --resume--> active
        any non-archived --archive--> archived (terminal)

    Executions are legal only while active. Metrics are replaced as a whole
    snapshot on every recorded execution.
    """

    MAX_NAME_LENGTH = 100

    def __init__(
        self,
        name: str,
        owner_id: UUID,
        config: IntegrationConfig,
        description: str | None = None,
        tags: Iterable[str] | None = None,
        entity_id: UUID | None = None,
    ):
        """Initialize Integration aggregate in draft status.

        Args:
            name: Integration name
            owner_id: Owning user ID
            config: Endpoints, credential and rate limits
            description: Optional description
            tags: Optional free-form tags (normalized)
            entity_id: Optional entity ID
        """
        super().__init__(entity_id)

        if not isinstance(config, IntegrationConfig):
            raise ValidationError("config must be an IntegrationConfig", field="config")

        self.name = self._validate_name(name)
        self.owner_id = owner_id
        self.description = (description or "").strip()
        self.tags = self.normalize_tags(tags or ())
        self.config = config
        self.status = IntegrationStatus.DRAFT
        self.metrics = IntegrationMetrics()

        self.add_event(
            IntegrationCreated(self.id, owner_id, self.name, config.integration_type)
        )

    def _validate_name(self, name: str) -> str:
        if not name or not name.strip():
            raise ValidationError("Integration name cannot be empty", field="name")

        name = name.strip()
        if len(name) > self.MAX_NAME_LENGTH:
            raise ValidationError(
                f"Integration name cannot exceed {self.MAX_NAME_LENGTH} characters",
                field="name",
            )
        return name

    @staticmethod
    def normalize_tags(tags: Iterable[str]) -> set[str]:
        """Trim, lower-case and de-duplicate tags, dropping blanks."""
        return {tag.strip().lower() for tag in tags if tag and tag.strip()}

    @property
    def integration_type(self) -> IntegrationType:
        return self.config.integration_type

    @property
    def credential(self) -> Credential:
        return self.config.auth

    @property
    def is_active(self) -> bool:
        return self.status == IntegrationStatus.ACTIVE

    @property
    def is_archived(self) -> bool:
        return self.status == IntegrationStatus.ARCHIVED

    def is_owned_by(self, user_id: UUID) -> bool:
        return self.owner_id == user_id

    def configuration_errors(self, now: datetime | None = None) -> dict[str, list[str]]:
        """Configuration problems that block activation, keyed by field."""
        errors: dict[str, list[str]] = {}
        if not self.config.has_endpoints:
            errors.setdefault("config.endpoints", []).append(NO_ENDPOINTS_ERROR)
        if self.config.auth.is_expired(now):
            errors.setdefault("config.auth", []).append(EXPIRED_CREDENTIAL_ERROR)
        return errors

    def _transition(self, new_status: IntegrationStatus) -> None:
        old_status = self.status
        self.status = new_status
        self.increment_version()
        self.add_event(IntegrationStatusChanged(self.id, old_status, new_status))

    def _ensure_not_archived(self, action: str) -> None:
        if self.is_archived:
            raise InvalidStatusTransitionError(action, self.status)

    def activate(self, now: datetime | None = None) -> None:
        """Move a draft integration to active after validating its configuration.

        Raises:
            InvalidStatusTransitionError: If not in draft
            ValidationError: If the configuration is not ready
        """
        if self.status == IntegrationStatus.ACTIVE:
            return
        if self.status != IntegrationStatus.DRAFT:
            raise InvalidStatusTransitionError("activate", self.status)

        errors = self.configuration_errors(now)
        if errors:
            raise ValidationError.from_fields(errors)

        self._transition(IntegrationStatus.ACTIVE)

    def pause(self) -> None:
        """Pause an active integration."""
        if self.status != IntegrationStatus.ACTIVE:
            raise InvalidStatusTransitionError("pause", self.status)
        self._transition(IntegrationStatus.PAUSED)

    def resume(self, now: datetime | None = None) -> None:
        """Return a paused integration to active, re-checking its configuration."""
        if self.status != IntegrationStatus.PAUSED:
            raise InvalidStatusTransitionError("resume", self.status)

        errors = self.configuration_errors(now)
        if errors:
            raise ValidationError.from_fields(errors)

        self._transition(IntegrationStatus.ACTIVE)

    def archive(self) -> None:
        """Archive the integration. Archived is terminal."""
        self._ensure_not_archived("archive")
        self._transition(IntegrationStatus.ARCHIVED)

    def ensure_executable(self) -> None:
        """
        Raises:
            PreconditionFailedError: If the integration is not active
        """
        if not self.status.can_execute:
            raise PreconditionFailedError(
                "execute integration",
                f"integration is {self.status.value}, executions require active status",
            )

    def record_execution(
        self,
        success: bool,
        duration_ms: float,
        at: datetime | None = None,
        error_message: str | None = None,
    ) -> IntegrationMetrics:
        """Fold one execution outcome into the metrics snapshot."""
        if duration_ms < 0:
            raise ValidationError("Execution duration cannot be negative", field="duration_ms")

        self.metrics = self.metrics.record(
            success, duration_ms, at or utc_now(), error_message
        )
        self.add_event(IntegrationExecuted(self.id, success, duration_ms, error_message))
        return self.metrics

    def update_details(
        self,
        name: str | None = None,
        description: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> None:
        self._ensure_not_archived("update")
        if name is not None:
            self.name = self._validate_name(name)
        if description is not None:
            self.description = description.strip()
        if tags is not None:
            self.tags = self.normalize_tags(tags)
        self.mark_modified()

    def update_config(self, config: IntegrationConfig) -> None:
        """Replace the connection settings.

        An active integration must keep at least one endpoint.
        """
        self._ensure_not_archived("update")
        if self.is_active and not config.has_endpoints:
            raise ValidationError(NO_ENDPOINTS_ERROR, field="config.endpoints")
        self.config = config
        self.increment_version()
        self.mark_modified()

    def refresh_credentials(self, credential: Credential) -> None:
        self._ensure_not_archived("refresh credentials of")
        self.config = self.config.with_auth(credential)
        self.increment_version()
        self.add_event(IntegrationCredentialsRefreshed(self.id))

    def clone(self, owner_id: UUID | None = None, name: str | None = None) -> "Integration":
        """Draft copy with the same configuration and fresh metrics."""
        return Integration(
            name=name or f"{self.name} (Copy)"[: self.MAX_NAME_LENGTH],
            owner_id=owner_id or self.owner_id,
            config=self.config,
            description=self.description,
            tags=self.tags,
        )

    def matches_term(self, term: str) -> bool:
        """Case-insensitive match over name, description and tags."""
        needle = term.strip().lower()
        if not needle:
            return True
        return (
            needle in self.name.lower()
            or needle in self.description.lower()
            or any(needle in tag for tag in self.tags)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "owner_id": str(self.owner_id),
            "name": self.name,
            "description": self.description,
            "tags": sorted(self.tags),
            "status": self.status.value,
            "config": self.config.to_dict(),
            "metrics": self.metrics.to_dict(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "version": self.version,
        }

    def __str__(self) -> str:
        return f"Integration({self.name}, {self.status.value})"
