"""Refresh credentials command and handler.

Replaces the credential of an integration, typically with a new secret
reference and a later expiry.
"""

from datetime import timedelta
from typing import Any
from uuid import UUID

from flowcreate.core.config import EngineConfig
from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.errors import ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import IntegrationDTO
from flowcreate.modules.integration.application.services import (
    build_credential,
    load_owned_integration,
)
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)
from flowcreate.modules.integration.domain.value_objects import Credential
from flowcreate.modules.integration.infrastructure.services import AggregateLockRegistry

logger = get_logger(__name__)


class RefreshCredentialsCommand(Command):
    """Command to replace an integration's authentication credential."""

    def __init__(
        self,
        integration_id: UUID,
        owner_id: UUID,
        credential: Credential | dict[str, Any],
    ):
        """Initialize refresh credentials command.

        Args:
            integration_id: Integration to update
            owner_id: Acting user
            credential: New credential, as a value object or payload
        """
        super().__init__()
        self.integration_id = integration_id
        self.owner_id = owner_id
        self.credential = credential
        self._freeze()

    def validate(self) -> None:
        if not self.integration_id or not self.owner_id:
            raise ValidationError("integration_id and owner_id are required")
        if self.credential is None:
            raise ValidationError("credential is required", field="credential")


class RefreshCredentialsCommandHandler(
    CommandHandler[RefreshCredentialsCommand, IntegrationDTO]
):
    """Handler for refreshing credentials."""

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        locks: AggregateLockRegistry,
        config: EngineConfig | None = None,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._locks = locks
        self._config = config or EngineConfig()

    async def handle(self, command: RefreshCredentialsCommand) -> CommandResult[IntegrationDTO]:
        """Handle refresh credentials command.

        Raises:
            NotFoundError: If integration not found
            ValidationError: If the credential is malformed or already expired
        """
        credential = build_credential(
            command.credential,
            refresh_lead=timedelta(seconds=self._config.credential_refresh_lead_seconds),
        )
        if credential.is_expired():
            raise ValidationError(
                "Replacement credential is already expired", field="credential.expires_at"
            )

        async with self._locks.hold(command.integration_id):
            integration = await load_owned_integration(
                self._integration_repository, command.integration_id, command.owner_id
            )
            integration.refresh_credentials(credential)
            await self._integration_repository.save(integration)

        logger.info(
            "Credentials refreshed",
            integration_id=str(integration.id),
            auth_type=credential.auth_type.value,
            expires_at=credential.expires_at.isoformat() if credential.expires_at else None,
        )
        return CommandResult.success_result(IntegrationDTO.from_domain(integration))

    @property
    def command_type(self) -> type[RefreshCredentialsCommand]:
        return RefreshCredentialsCommand
