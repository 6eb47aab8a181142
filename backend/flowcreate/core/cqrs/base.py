"""CQRS base classes.

Architecture:
- Command: an intent to change system state
- Query: a request for information
- CommandHandler / QueryHandler: process one message type each
- CommandBus / QueryBus: route messages to their handler
- CommandResult / QueryResult: the uniform response envelope

Handlers never raise past the bus. Every outcome, including validation
failures and unexpected faults, is returned as an envelope with
``success``, ``data``, ``error_message`` and ``warnings``.
"""

import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Generic, TypeVar
from uuid import UUID, uuid4

from flowcreate.core.domain.base import utc_now
from flowcreate.core.errors import ConfigurationError, FlowCreateError
from flowcreate.core.logging import get_logger

logger = get_logger(__name__)

TCommand = TypeVar("TCommand", bound="Command")
TQuery = TypeVar("TQuery", bound="Query")
TResult = TypeVar("TResult")

GENERIC_FAILURE_MESSAGE = "An unexpected error occurred while processing the request"


class CommandResult(Generic[TResult]):
    """
    Uniform result envelope.

    ``success=False`` always carries a non-empty ``error_message``.
    """

    def __init__(
        self,
        success: bool,
        data: TResult | None = None,
        error_message: str | None = None,
        error_code: str | None = None,
        warnings: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ):
        if not success and not error_message:
            error_message = GENERIC_FAILURE_MESSAGE
        self.success = success
        self.data = data
        self.error_message = error_message
        self.error_code = error_code
        self.warnings = list(warnings or [])
        self.metadata = metadata or {}
        self.timestamp = utc_now()

    @classmethod
    def success_result(
        cls,
        data: TResult | None = None,
        warnings: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> "CommandResult[TResult]":
        """Create successful result."""
        return cls(success=True, data=data, warnings=warnings, metadata=metadata)

    @classmethod
    def failure_result(
        cls,
        error_message: str,
        error_code: str | None = None,
        warnings: list[str] | None = None,
        data: TResult | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> "CommandResult[TResult]":
        """Create failed result."""
        return cls(
            success=False,
            data=data,
            error_message=error_message,
            error_code=error_code,
            warnings=warnings,
            metadata=metadata,
        )

    @classmethod
    def from_error(cls, error: FlowCreateError) -> "CommandResult[TResult]":
        """Translate a domain or application error into a failed envelope."""
        return cls.failure_result(
            error_message=error.user_message or error.message,
            error_code=error.code,
            metadata={"details": error.to_dict().get("details", {})},
        )

    def is_success(self) -> bool:
        return self.success

    def is_failure(self) -> bool:
        return not self.success

    def get_data(self) -> TResult:
        """Get result data, raises if the operation failed."""
        if not self.success:
            raise RuntimeError(f"Operation failed: {self.error_message}")
        return self.data

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary."""
        data = self.data.to_dict() if hasattr(self.data, "to_dict") else self.data
        result = {
            "success": self.success,
            "data": data,
            "error_message": self.error_message,
            "warnings": self.warnings,
        }
        if self.error_code:
            result["error_code"] = self.error_code
        return result


class QueryResult(CommandResult[TResult]):
    """Result envelope with pagination support."""

    def __init__(
        self,
        success: bool,
        data: TResult | None = None,
        error_message: str | None = None,
        error_code: str | None = None,
        warnings: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
        total_count: int | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ):
        super().__init__(success, data, error_message, error_code, warnings, metadata)
        self.total_count = total_count
        self.limit = limit
        self.offset = offset

    @classmethod
    def paginated_result(
        cls,
        items: TResult,
        total_count: int,
        limit: int,
        offset: int,
        warnings: list[str] | None = None,
    ) -> "QueryResult[TResult]":
        """Create a successful page of results."""
        return cls(
            success=True,
            data=items,
            warnings=warnings,
            total_count=total_count,
            limit=limit,
            offset=offset,
        )

    @property
    def has_next(self) -> bool:
        if self.total_count is None or self.limit is None:
            return False
        return (self.offset or 0) + self.limit < self.total_count

    def get_pagination_info(self) -> dict[str, Any]:
        return {
            "total_count": self.total_count,
            "limit": self.limit,
            "offset": self.offset,
            "has_next": self.has_next,
        }

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.total_count is not None:
            result["pagination"] = self.get_pagination_info()
        return result


class _Message(ABC):
    """Shared behaviour of commands and queries."""

    def __init__(self):
        self.message_id = uuid4()
        self.created_at = utc_now()
        self._frozen = False

    def _freeze(self) -> None:
        """Mark the message as frozen (immutable)."""
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(
                f"Cannot modify immutable message {self.__class__.__name__}"
            )
        super().__setattr__(name, value)

    def validate(self) -> None:
        """
        Validate message state. Override in subclasses.

        Raises:
            ValidationError: If the message carries malformed input
        """

    def to_dict(self) -> dict[str, Any]:
        result = {}
        for key, value in self.__dict__.items():
            if key.startswith("_"):
                continue
            if isinstance(value, UUID):
                result[key] = str(value)
            elif isinstance(value, datetime):
                result[key] = value.isoformat()
            else:
                result[key] = value
        result["message_type"] = self.__class__.__name__
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.message_id})"


class Command(_Message):
    """
    Base command class representing an intent to change system state.

    Usage Example:
        class PauseIntegrationCommand(Command):
            def __init__(self, integration_id: UUID, owner_id: UUID):
                super().__init__()
                self.integration_id = integration_id
                self.owner_id = owner_id
                self._freeze()
    """

    @property
    def command_id(self) -> UUID:
        return self.message_id


class Query(_Message):
    """Base query class representing a request for information."""

    @property
    def query_id(self) -> UUID:
        return self.message_id


class _TrackedHandler(ABC):
    """Execution tracking shared by command and query handlers."""

    message_kind = "message"

    def __init__(self):
        self._execution_count = 0
        self._total_execution_time = 0.0
        self._error_count = 0

    @abstractmethod
    async def handle(self, message: Any) -> CommandResult:
        """
        Handle the message and return an envelope.

        Raises:
            FlowCreateError: Expected failures, converted by the tracker
        """

    async def execute_with_tracking(self, message: Any) -> CommandResult:
        """
        Validate and handle ``message``, converting every failure to an envelope.
        """
        start_time = time.perf_counter()
        message_type = message.__class__.__name__
        self._execution_count += 1
        try:
            message.validate()
            result = await self.handle(message)
        except FlowCreateError as e:
            self._error_count += 1
            logger.warning(
                f"{self.message_kind.capitalize()} rejected",
                message_type=message_type,
                message_id=str(message.message_id),
                error_code=e.code,
                error=e.message,
            )
            result = self._result_class().from_error(e)
        except Exception as e:
            self._error_count += 1
            logger.exception(
                f"{self.message_kind.capitalize()} execution failed",
                message_type=message_type,
                message_id=str(message.message_id),
                error=str(e),
            )
            result = self._result_class().failure_result(
                GENERIC_FAILURE_MESSAGE, error_code="INTERNAL_ERROR"
            )
        finally:
            self._total_execution_time += time.perf_counter() - start_time

        logger.debug(
            f"{self.message_kind.capitalize()} handled",
            message_type=message_type,
            message_id=str(message.message_id),
            success=result.success,
        )
        return result

    def _result_class(self) -> type[CommandResult]:
        return CommandResult

    def get_performance_stats(self) -> dict[str, Any]:
        """Get performance statistics for this handler."""
        return {
            "handler_class": self.__class__.__name__,
            "execution_count": self._execution_count,
            "error_count": self._error_count,
            "average_execution_time": self._total_execution_time
            / max(self._execution_count, 1),
        }


class CommandHandler(_TrackedHandler, Generic[TCommand, TResult]):
    """
    Base command handler.

    Usage Example:
        class PauseIntegrationCommandHandler(
            CommandHandler[PauseIntegrationCommand, IntegrationDTO]
        ):
            async def handle(self, command):
                ...
                return CommandResult.success_result(dto)

            @property
            def command_type(self):
                return PauseIntegrationCommand
    """

    message_kind = "command"

    @property
    @abstractmethod
    def command_type(self) -> type[TCommand]:
        """Get the command type this handler processes."""


class QueryHandler(_TrackedHandler, Generic[TQuery, TResult]):
    """Base query handler. Queries never mutate aggregates."""

    message_kind = "query"

    @property
    @abstractmethod
    def query_type(self) -> type[TQuery]:
        """Get the query type this handler processes."""

    def _result_class(self) -> type[CommandResult]:
        return QueryResult


class _Bus:
    def __init__(self):
        self._handlers: dict[type, _TrackedHandler] = {}
        self._metrics = {"total": 0, "successful": 0, "failed": 0}

    def _register(self, message_type: type, handler: _TrackedHandler) -> None:
        if message_type in self._handlers:
            raise ConfigurationError(
                f"Handler already registered for {message_type.__name__}"
            )
        self._handlers[message_type] = handler
        logger.debug(
            "Handler registered",
            message_type=message_type.__name__,
            handler=handler.__class__.__name__,
        )

    async def _dispatch(self, message: Any) -> CommandResult:
        handler = self._handlers.get(type(message))
        if handler is None:
            raise ConfigurationError(
                f"No handler registered for {type(message).__name__}"
            )

        self._metrics["total"] += 1
        result = await handler.execute_with_tracking(message)
        self._metrics["successful" if result.success else "failed"] += 1
        return result

    def get_metrics(self) -> dict[str, Any]:
        return {**self._metrics, "registered_handlers": len(self._handlers)}


class CommandBus(_Bus):
    """Routes commands to their registered handler."""

    def register(self, handler: CommandHandler) -> None:
        """
        Register a command handler.

        Raises:
            ConfigurationError: If a handler is already registered for the type
        """
        self._register(handler.command_type, handler)

    async def execute(self, command: Command) -> CommandResult:
        """
        Execute a command by routing to its handler.

        Raises:
            ConfigurationError: If no handler is registered for the command type
        """
        return await self._dispatch(command)


class QueryBus(_Bus):
    """Routes queries to their registered handler."""

    def register(self, handler: QueryHandler) -> None:
        """
        Register a query handler.

        Raises:
            ConfigurationError: If a handler is already registered for the type
        """
        self._register(handler.query_type, handler)

    async def execute(self, query: Query) -> QueryResult:
        """
        Execute a query by routing to its handler.

        Raises:
            ConfigurationError: If no handler is registered for the query type
        """
        return await self._dispatch(query)


__all__ = [
    "Command",
    "CommandBus",
    "CommandHandler",
    "CommandResult",
    "Query",
    "QueryBus",
    "QueryHandler",
    "QueryResult",
]
