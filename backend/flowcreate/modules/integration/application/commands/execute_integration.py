"""Execute integration command and handler."""

from collections.abc import Iterable
from typing import Any
from uuid import UUID

from flowcreate.core.cqrs.base import Command, CommandHandler, CommandResult
from flowcreate.core.errors import ValidationError
from flowcreate.core.logging import bound_log_context, get_logger
from flowcreate.modules.integration.application.services import (
    load_owned_integration,
    load_owned_mapping,
)
from flowcreate.modules.integration.domain.aggregates import DataMapping
from flowcreate.modules.integration.domain.enums import (
    ExecutionErrorKind,
    ExecutionTrigger,
)
from flowcreate.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
    IIntegrationRepository,
)
from flowcreate.modules.integration.domain.services import (
    ExecutionContext,
    IntegrationExecutionService,
)
from flowcreate.modules.integration.domain.value_objects import ExecutionResult
from flowcreate.modules.integration.infrastructure.services import AggregateLockRegistry

logger = get_logger(__name__)


class ExecuteIntegrationCommand(Command):
    """Command to run an integration once against its endpoints."""

    def __init__(
        self,
        integration_id: UUID,
        owner_id: UUID,
        payload: Any = None,
        headers: dict[str, str] | None = None,
        source_ip: str | None = None,
        trigger: ExecutionTrigger | str = ExecutionTrigger.MANUAL,
        mapping_ids: Iterable[UUID] | None = None,
    ):
        """Initialize execute integration command.

        Args:
            integration_id: Integration to execute
            owner_id: Acting user
            payload: Request payload sent to every endpoint
            headers: Extra request headers
            source_ip: Address of the caller, for auditing
            trigger: What started the execution
            mapping_ids: Mappings applied to the response. When None, every
                active mapping of the integration is applied
        """
        super().__init__()
        self.integration_id = integration_id
        self.owner_id = owner_id
        self.payload = payload
        self.headers = dict(headers or {})
        self.source_ip = source_ip
        self.trigger = trigger
        self.mapping_ids = list(mapping_ids) if mapping_ids is not None else None
        self._freeze()

    def validate(self) -> None:
        field_errors: dict[str, list[str]] = {}
        if not self.integration_id:
            field_errors["integration_id"] = ["integration_id is required"]
        if not self.owner_id:
            field_errors["owner_id"] = ["owner_id is required"]
        try:
            ExecutionTrigger(self.trigger)
        except ValueError:
            allowed = ", ".join(trigger.value for trigger in ExecutionTrigger)
            field_errors["trigger"] = [f"Trigger must be one of: {allowed}"]
        if any(not isinstance(value, str) for value in self.headers.values()):
            field_errors["headers"] = ["Header values must be strings"]
        if field_errors:
            raise ValidationError.from_fields(field_errors)


class ExecuteIntegrationCommandHandler(
    CommandHandler[ExecuteIntegrationCommand, ExecutionResult]
):
    """Handler for executing integrations.

    The execution and the save of the recorded metrics happen under the
    integration's lock, so concurrent executions of one integration are
    applied one after the other.
    """

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        mapping_repository: IDataMappingRepository,
        execution_service: IntegrationExecutionService,
        locks: AggregateLockRegistry,
    ):
        super().__init__()
        self._integration_repository = integration_repository
        self._mapping_repository = mapping_repository
        self._execution_service = execution_service
        self._locks = locks

    async def handle(self, command: ExecuteIntegrationCommand) -> CommandResult[ExecutionResult]:
        context = ExecutionContext(
            payload=command.payload,
            headers=command.headers,
            source_ip=command.source_ip,
            trigger=ExecutionTrigger(command.trigger),
            owner_id=command.owner_id,
        )

        with bound_log_context(
            execution_id=context.execution_id,
            integration_id=str(command.integration_id),
        ):
            async with self._locks.hold(command.integration_id):
                integration = await load_owned_integration(
                    self._integration_repository, command.integration_id, command.owner_id
                )
                mappings = await self._resolve_mappings(command)
                try:
                    result = await self._execution_service.execute_integration(
                        integration, context, mappings=mappings
                    )
                except Exception:
                    # the failed attempt is already recorded on the aggregate
                    await self._integration_repository.save(integration)
                    raise
                if result.error_kind != ExecutionErrorKind.PRECONDITION:
                    await self._integration_repository.save(integration)

            logger.info(
                "Execute integration handled",
                trigger=context.trigger.value,
                source_ip=command.source_ip,
                success=result.success,
            )

        if result.success:
            return CommandResult.success_result(result, warnings=list(result.warnings))

        error_code = (
            "PRECONDITION_FAILED"
            if result.error_kind == ExecutionErrorKind.PRECONDITION
            else "EXECUTION_FAILED"
        )
        return CommandResult.failure_result(
            result.error_message,
            error_code=error_code,
            warnings=list(result.warnings),
            data=result,
        )

    async def _resolve_mappings(
        self, command: ExecuteIntegrationCommand
    ) -> list[DataMapping]:
        if command.mapping_ids is None:
            mappings = await self._mapping_repository.get_by_integration(
                command.integration_id
            )
            return [mapping for mapping in mappings if mapping.is_active]

        mappings = []
        for mapping_id in command.mapping_ids:
            mapping = await load_owned_mapping(
                self._mapping_repository, mapping_id, command.owner_id
            )
            if mapping.integration_id != command.integration_id:
                raise ValidationError(
                    f"Data mapping {mapping_id} belongs to another integration",
                    field="mapping_ids",
                )
            mappings.append(mapping)
        return mappings

    @property
    def command_type(self) -> type[ExecuteIntegrationCommand]:
        return ExecuteIntegrationCommand
