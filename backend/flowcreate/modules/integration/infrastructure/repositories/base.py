"""Snapshot-based in-memory storage shared by the repositories."""

import copy
from typing import Generic, TypeVar
from uuid import UUID

from flowcreate.core.domain.base import AggregateRoot

AggregateT = TypeVar("AggregateT", bound=AggregateRoot)


class InMemoryRepository(Generic[AggregateT]):
    """Stores deep copies so a reader never observes a half-applied update.

    Saved aggregates have their pending events cleared on the stored copy;
    the caller keeps its own events.
    """

    def __init__(self):
        self._items: dict[UUID, AggregateT] = {}

    def _snapshot(self, aggregate: AggregateT) -> AggregateT:
        stored = copy.deepcopy(aggregate)
        stored.clear_events()
        return stored

    async def get_by_id(self, aggregate_id: UUID) -> AggregateT | None:
        stored = self._items.get(aggregate_id)
        return copy.deepcopy(stored) if stored is not None else None

    async def save(self, aggregate: AggregateT) -> AggregateT:
        self._items[aggregate.id] = self._snapshot(aggregate)
        return aggregate

    async def delete(self, aggregate_id: UUID) -> bool:
        return self._items.pop(aggregate_id, None) is not None

    def _select(self, predicate) -> list[AggregateT]:
        matches = [item for item in self._items.values() if predicate(item)]
        matches.sort(key=lambda item: item.created_at)
        return [copy.deepcopy(item) for item in matches]

    def __len__(self) -> int:
        return len(self._items)
