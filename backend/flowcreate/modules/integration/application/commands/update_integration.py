"""Update integration command and handler."""

from collections.abc import Iterable
from datetime import timedelta
from typing import Any
from uuid import UUID

from flowcreate.core.config import EngineConfig
from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.errors import ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import IntegrationDTO
from flowcreate.modules.integration.application.services import (
    build_integration_config,
    load_owned_integration,
)
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)
from flowcreate.modules.integration.domain.value_objects import IntegrationConfig
from flowcreate.modules.integration.infrastructure.services import AggregateLockRegistry

logger = get_logger(__name__)


class UpdateIntegrationCommand(Command):
    """Command to edit an integration's details or connection settings.

    Fields left as None are not changed.
    """

    def __init__(
        self,
        integration_id: UUID,
        owner_id: UUID,
        name: str | None = None,
        description: str | None = None,
        tags: Iterable[str] | None = None,
        config: IntegrationConfig | dict[str, Any] | None = None,
    ):
        super().__init__()
        self.integration_id = integration_id
        self.owner_id = owner_id
        self.name = name
        self.description = description
        self.tags = list(tags) if tags is not None else None
        self.config = config
        self._freeze()

    @property
    def has_changes(self) -> bool:
        return any(
            value is not None
            for value in (self.name, self.description, self.tags, self.config)
        )

    def validate(self) -> None:
        if not self.integration_id or not self.owner_id:
            raise ValidationError("integration_id and owner_id are required")
        if not self.has_changes:
            raise ValidationError("No changes provided")
        if self.name is not None and not self.name.strip():
            raise ValidationError("Integration name cannot be empty", field="name")


class UpdateIntegrationCommandHandler(
    CommandHandler[UpdateIntegrationCommand, IntegrationDTO]
):
    """Handler for updating integrations."""

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

    async def handle(self, command: UpdateIntegrationCommand) -> CommandResult[IntegrationDTO]:
        async with self._locks.hold(command.integration_id):
            integration = await load_owned_integration(
                self._integration_repository, command.integration_id, command.owner_id
            )

            integration.update_details(
                name=command.name, description=command.description, tags=command.tags
            )
            if command.config is not None:
                integration.update_config(
                    build_integration_config(
                        command.config,
                        refresh_lead=timedelta(
                            seconds=self._config.credential_refresh_lead_seconds
                        ),
                    )
                )

            await self._integration_repository.save(integration)

        logger.info(
            "Integration updated",
            integration_id=str(integration.id),
            config_changed=command.config is not None,
        )
        return CommandResult.success_result(IntegrationDTO.from_domain(integration))

    @property
    def command_type(self) -> type[UpdateIntegrationCommand]:
        return UpdateIntegrationCommand
