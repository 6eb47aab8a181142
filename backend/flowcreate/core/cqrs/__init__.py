"""Command/query separation primitives."""

from flowcreate.core.cqrs.base import (
    Command,
    CommandBus,
    CommandHandler,
    CommandResult,
    Query,
    QueryBus,
    QueryHandler,
    QueryResult,
)

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
