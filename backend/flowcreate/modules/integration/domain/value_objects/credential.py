"""Authentication credential value object."""

import base64
from datetime import datetime, timedelta
from typing import Any

from flowcreate.core.domain.base import ValueObject, utc_now
from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.domain.enums import AuthType

DEFAULT_REFRESH_LEAD = timedelta(minutes=5)


class Credential(ValueObject):
    """Value object describing how an integration authenticates.

    The secret itself never lives on the aggregate. ``secret_ref`` is an
    opaque reference that a secret resolver turns into the real value at call
    time.
    """

    def __init__(
        self,
        auth_type: AuthType | str,
        secret_ref: str,
        expires_at: datetime | None = None,
        refresh_lead: timedelta = DEFAULT_REFRESH_LEAD,
    ):
        """Initialize credential.

        Args:
            auth_type: Authentication scheme
            secret_ref: Opaque reference to the secret material
            expires_at: Optional expiry instant (timezone aware)
            refresh_lead: How long before expiry a refresh becomes due

        Raises:
            ValidationError: If credential is invalid
        """
        super().__init__()
        if not isinstance(auth_type, AuthType):
            try:
                auth_type = AuthType(auth_type)
            except ValueError as e:
                allowed = ", ".join(t.value for t in AuthType)
                raise ValidationError(
                    f"Invalid auth type '{auth_type}'. Must be one of: {allowed}",
                    field="auth_type",
                ) from e
        self.auth_type = auth_type

        self.validate_not_empty(secret_ref, "secret_ref")
        self.secret_ref = secret_ref.strip()

        if expires_at is not None and expires_at.tzinfo is None:
            raise ValidationError(
                "Credential expiry must be timezone aware", field="expires_at"
            )
        self.expires_at = expires_at

        if refresh_lead < timedelta(0):
            raise ValidationError(
                "Refresh lead time cannot be negative", field="refresh_lead"
            )
        self.refresh_lead = refresh_lead

        self._freeze()

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the credential has passed its expiry instant."""
        if self.expires_at is None:
            return False
        return (now or utc_now()) >= self.expires_at

    def needs_refresh(self, now: datetime | None = None) -> bool:
        """Check whether expiry falls within the refresh lead time."""
        if self.expires_at is None:
            return False
        return (now or utc_now()) + self.refresh_lead >= self.expires_at

    def time_until_expiry(self, now: datetime | None = None) -> timedelta | None:
        if self.expires_at is None:
            return None
        return self.expires_at - (now or utc_now())

    def with_refresh_lead(self, refresh_lead: timedelta) -> "Credential":
        return Credential(self.auth_type, self.secret_ref, self.expires_at, refresh_lead)

    def auth_headers(self, secret: str) -> dict[str, str]:
        """Build request headers for this scheme from the resolved secret.

        For basic auth the secret is expected as ``username:password``.
        """
        if self.auth_type == AuthType.API_KEY:
            return {"X-API-Key": secret}
        if self.auth_type == AuthType.OAUTH:
            return {"Authorization": f"Bearer {secret}"}
        encoded = base64.b64encode(secret.encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {encoded}"}

    @property
    def masked_ref(self) -> str:
        if len(self.secret_ref) <= 4:
            return "****"
        return f"{self.secret_ref[:2]}****{self.secret_ref[-2:]}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "auth_type": self.auth_type.value,
            "secret_ref": self.masked_ref,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "refresh_lead_seconds": int(self.refresh_lead.total_seconds()),
        }

    def __str__(self) -> str:
        return f"{self.auth_type} credential ({self.masked_ref})"
