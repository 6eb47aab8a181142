"""Domain primitives for FlowCreate bounded contexts.

Architecture:
- ValueObject: Immutable objects representing domain concepts
- Entity: Mutable objects with identity and lifecycle
- AggregateRoot: Entities that manage domain events and consistency
- DomainEvent: Something that happened that other parts of the system care about
- DomainService: Stateless domain logic coordinators
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any, TypeVar
from uuid import UUID, uuid4

from flowcreate.core.errors import ValidationError


def utc_now() -> datetime:
    """Timezone aware current time used by every aggregate timestamp."""
    return datetime.now(UTC)


class ValueObject(ABC):
    """
    Base value object.

    Value objects are immutable and equal when all their public attributes are
    equal. Subclasses validate in ``__init__`` and call ``_freeze()`` last.

    Usage Example:
        class Price(ValueObject):
            def __init__(self, amount: Decimal, currency: str):
                super().__init__()
                if amount < 0:
                    raise ValidationError("Price cannot be negative")
                self.amount = amount
                self.currency = currency.upper()
                self._freeze()

            def __str__(self) -> str:
                return f"{self.amount} {self.currency}"
    """

    def __init__(self):
        self._frozen = False
        self._hash_cache = None

    def _freeze(self) -> None:
        """Mark the object as frozen (immutable)."""
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False) and name != "_hash_cache":
            raise AttributeError(f"Cannot modify immutable {self.__class__.__name__}")
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(
                f"Cannot delete attribute from immutable {self.__class__.__name__}"
            )
        super().__delattr__(name)

    def _public_attrs(self) -> dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self._public_attrs() == other._public_attrs()

    def __hash__(self) -> int:
        if self._hash_cache is None:
            values = []
            for key, value in sorted(self._public_attrs().items()):
                if isinstance(value, dict):
                    value = tuple(sorted((k, repr(v)) for k, v in value.items()))
                elif isinstance(value, list | set):
                    value = tuple(sorted(value) if isinstance(value, set) else value)
                values.append((key, value))
            self._hash_cache = hash((self.__class__.__name__, tuple(values)))
        return self._hash_cache

    def __repr__(self) -> str:
        attrs = ", ".join(f"{key}={value!r}" for key, value in self._public_attrs().items())
        return f"{self.__class__.__name__}({attrs})"

    @abstractmethod
    def __str__(self) -> str:
        """String representation. Must be implemented by subclasses."""

    def to_dict(self) -> dict[str, Any]:
        """Convert value object to dictionary."""
        result = {}
        for key, value in self._public_attrs().items():
            if hasattr(value, "to_dict"):
                result[key] = value.to_dict()
            elif isinstance(value, datetime):
                result[key] = value.isoformat()
            elif isinstance(value, UUID):
                result[key] = str(value)
            else:
                result[key] = value
        return result

    @classmethod
    def validate_not_empty(cls, value: Any, field_name: str) -> None:
        """
        Validate that a value is not empty.

        Raises:
            ValidationError: If value is empty
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"{field_name} cannot be empty", field=field_name)


class Entity(ABC):
    """
    Base entity with identity and lifecycle management.

    Entities are defined by their identity rather than their attributes.
    """

    def __init__(self, entity_id: UUID | None = None):
        """
        Initialize entity with ID and timestamps.

        Args:
            entity_id: Optional UUID for the entity (auto-generated if not provided)
        """
        self.id = entity_id or uuid4()
        self.created_at = utc_now()
        self.updated_at = self.created_at

        self._validate_entity()

    def _validate_entity(self) -> None:
        if not isinstance(self.id, UUID):
            raise ValidationError("Entity ID must be a UUID", field="id")

    def mark_modified(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utc_now()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self.id))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id}, created_at={self.created_at})"

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.id})"


class DomainEvent(ABC):
    """
    Base domain event class.

    Domain events represent something that happened in the domain
    that domain experts care about.
    """

    def __init__(self):
        self.event_id = uuid4()
        self.occurred_at = utc_now()

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def __str__(self) -> str:
        """String representation of the event."""


class AggregateRoot(Entity):
    """
    Aggregate root with domain event management.

    Aggregate roots are the consistency boundary for a cluster of related
    objects. They collect domain events and carry a version that increases on
    every recorded change.
    """

    def __init__(self, entity_id: UUID | None = None):
        self._events: list[DomainEvent] = []
        self._version = 1
        super().__init__(entity_id)

    def add_event(self, event: DomainEvent) -> None:
        """
        Add a domain event to the aggregate.

        Raises:
            ValidationError: If event is invalid
        """
        if not isinstance(event, DomainEvent):
            raise ValidationError("Event must be a DomainEvent instance")
        self._events.append(event)
        self.mark_modified()

    def clear_events(self) -> list[DomainEvent]:
        """Clear and return all uncommitted events."""
        events = self._events.copy()
        self._events.clear()
        return events

    def get_events(self) -> list[DomainEvent]:
        """Return uncommitted events without clearing them."""
        return self._events.copy()

    def increment_version(self) -> None:
        self._version += 1

    @property
    def version(self) -> int:
        """Get current aggregate version."""
        return self._version

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"id={self.id}, "
            f"version={self._version}, "
            f"events={len(self._events)})"
        )


class DomainService(ABC):
    """
    Base class for domain services.

    Domain services hold domain logic that does not belong to a single
    aggregate. They are stateless apart from injected collaborators.
    """

    @abstractmethod
    def __str__(self) -> str:
        """String representation of the service."""


T = TypeVar("T")
AggregateT = TypeVar("AggregateT", bound=AggregateRoot)

__all__ = [
    "AggregateRoot",
    "AggregateT",
    "DomainEvent",
    "DomainService",
    "Entity",
    "ValueObject",
    "utc_now",
]
