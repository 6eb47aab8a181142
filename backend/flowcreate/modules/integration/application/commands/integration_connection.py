"""Test integration connection command and handler."""

from uuid import UUID

from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.errors import ValidationError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.application.services import load_owned_integration
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)
from flowcreate.modules.integration.domain.services import IntegrationExecutionService
from flowcreate.modules.integration.domain.value_objects import ConnectionTestResult
from flowcreate.modules.integration.infrastructure.services import AggregateLockRegistry

logger = get_logger(__name__)


class TestIntegrationCommand(Command):
    """Command to probe an integration's primary endpoint."""

    def __init__(self, integration_id: UUID, owner_id: UUID):
        super().__init__()
        self.integration_id = integration_id
        self.owner_id = owner_id
        self._freeze()

    def validate(self) -> None:
        if not self.integration_id or not self.owner_id:
            raise ValidationError("integration_id and owner_id are required")


class TestIntegrationCommandHandler(
    CommandHandler[TestIntegrationCommand, ConnectionTestResult]
):
    """Handler for connection tests. The probe is recorded in the metrics."""

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        execution_service: IntegrationExecutionService,
        locks: AggregateLockRegistry,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._execution_service = execution_service
        self._locks = locks

    async def handle(self, command: TestIntegrationCommand) -> CommandResult[ConnectionTestResult]:
        async with self._locks.hold(command.integration_id):
            integration = await load_owned_integration(
                self._integration_repository, command.integration_id, command.owner_id
            )
            try:
                result = await self._execution_service.test_integration_connection(integration)
            finally:
                await self._integration_repository.save(integration)

        if not result.success:
            return CommandResult.failure_result(
                result.error_message or "Connection test failed",
                error_code="CONNECTION_TEST_FAILED",
                data=result,
            )
        return CommandResult.success_result(result)

    @property
    def command_type(self) -> type[TestIntegrationCommand]:
        return TestIntegrationCommand
