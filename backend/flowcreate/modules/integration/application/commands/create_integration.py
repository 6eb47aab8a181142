"""Create integration command and handler."""

from collections.abc import Iterable
from datetime import timedelta
from typing import Any
from uuid import UUID

from flowcreate.core.config import EngineConfig
from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.errors import ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import IntegrationDTO
from flowcreate.modules.integration.application.services import build_integration_config
from flowcreate.modules.integration.domain.aggregates import Integration
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)
from flowcreate.modules.integration.domain.services import IntegrationExecutionService
from flowcreate.modules.integration.domain.value_objects import IntegrationConfig

logger = get_logger(__name__)


class CreateIntegrationCommand(Command):
    """Command to register a new integration in draft status."""

    def __init__(
        self,
        owner_id: UUID,
        name: str,
        config: IntegrationConfig | dict[str, Any],
        description: str | None = None,
        tags: Iterable[str] | None = None,
    ):
        """Initialize create integration command.

        Args:
            owner_id: User creating the integration
            name: Integration name
            config: Endpoints, auth and rate limits, as a value object or payload
            description: Optional description
            tags: Optional tags
        """
        super().__init__()

        self.owner_id = owner_id
        self.name = name
        self.config = config
        self.description = description
        self.tags = list(tags or [])

        self._freeze()

    def validate(self) -> None:
        field_errors: dict[str, list[str]] = {}
        if not self.owner_id:
            field_errors["owner_id"] = ["owner_id is required"]
        if not self.name or not self.name.strip():
            field_errors["name"] = ["Integration name is required"]
        if self.config is None:
            field_errors["config"] = ["Integration config is required"]
        if field_errors:
            raise ValidationError.from_fields(field_errors)


class CreateIntegrationCommandHandler(
    CommandHandler[CreateIntegrationCommand, IntegrationDTO]
):
    """Handler for creating integrations."""

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        execution_service: IntegrationExecutionService,
        config: EngineConfig | None = None,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._execution_service = execution_service
        self._config = config or EngineConfig()

    async def handle(self, command: CreateIntegrationCommand) -> CommandResult[IntegrationDTO]:
        """Handle create integration command.

        Raises:
            ValidationError: If the config is malformed or not ready for use
        """
        logger.info(
            "Creating integration", owner_id=str(command.owner_id), name=command.name
        )

        config = build_integration_config(
            command.config,
            refresh_lead=timedelta(seconds=self._config.credential_refresh_lead_seconds),
        )
        integration = Integration(
            name=command.name,
            owner_id=command.owner_id,
            config=config,
            description=command.description,
            tags=command.tags,
        )

        validation = self._execution_service.validate_integration(integration)
        if not validation.is_valid:
            raise ValidationError.from_fields(integration.configuration_errors())

        await self._integration_repository.save(integration)

        logger.info(
            "Integration created",
            integration_id=str(integration.id),
            integration_type=integration.integration_type.value,
        )
        return CommandResult.success_result(
            IntegrationDTO.from_domain(integration), warnings=list(validation.warnings)
        )

    @property
    def command_type(self) -> type[CreateIntegrationCommand]:
        return CreateIntegrationCommand
