"""Domain building blocks shared by every FlowCreate module."""

from flowcreate.core.domain.base import (
    AggregateRoot,
    DomainEvent,
    DomainService,
    Entity,
    ValueObject,
    utc_now,
)

__all__ = [
    "AggregateRoot",
    "DomainEvent",
    "DomainService",
    "Entity",
    "ValueObject",
    "utc_now",
]
