"""Clone integration command and handler."""

from uuid import UUID

from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.errors import ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.dto import IntegrationDTO
from flowcreate.modules.integration.application.services import load_owned_integration
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)

logger = get_logger(__name__)


class CloneIntegrationCommand(Command):
    """Command to copy an integration into a new draft."""

    def __init__(self, integration_id: UUID, owner_id: UUID, name: str | None = None):
        super().__init__()
        self.integration_id = integration_id
        self.owner_id = owner_id
        self.name = name
        self._freeze()

    def validate(self) -> None:
        if not self.integration_id or not self.owner_id:
            raise ValidationError("integration_id and owner_id are required")
        if self.name is not None and not self.name.strip():
            raise ValidationError("Clone name cannot be empty", field="name")


class CloneIntegrationCommandHandler(CommandHandler[CloneIntegrationCommand, IntegrationDTO]):
    """Handler for cloning integrations."""

    def __init__(self, integration_repository: IIntegrationRepository):
        super().__init__()
        self._integration_repository = integration_repository

    async def handle(self, command: CloneIntegrationCommand) -> CommandResult[IntegrationDTO]:
        source = await load_owned_integration(
            self._integration_repository, command.integration_id, command.owner_id
        )
        clone = source.clone(owner_id=command.owner_id, name=command.name)
        await self._integration_repository.save(clone)

        logger.info(
            "Integration cloned",
            source_integration_id=str(source.id),
            integration_id=str(clone.id),
        )
        return CommandResult.success_result(IntegrationDTO.from_domain(clone))

    @property
    def command_type(self) -> type[CloneIntegrationCommand]:
        return CloneIntegrationCommand
