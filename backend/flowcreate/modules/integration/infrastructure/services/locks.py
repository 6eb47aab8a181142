"""Per-aggregate serialization of mutations."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from flowcreate.core.logging import get_logger

logger = get_logger(__name__)


class AggregateLockRegistry:
    """One ``asyncio.Lock`` per aggregate id.

    Writers of the same aggregate are serialized; writers of different
    aggregates proceed in parallel. A lock lives only while some caller
    holds or waits for it.

    Usage Example:
        async with locks.hold(integration_id):
            integration = await repository.get_by_id(integration_id)
            ...
            await repository.save(integration)
    """

    def __init__(self):
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._users: dict[UUID, int] = {}

    def is_held(self, aggregate_id: UUID) -> bool:
        lock = self._locks.get(aggregate_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, aggregate_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.get(aggregate_id)
        if lock is None:
            lock = self._locks[aggregate_id] = asyncio.Lock()
        elif lock.locked():
            logger.debug("Waiting for aggregate lock", aggregate_id=str(aggregate_id))
        self._users[aggregate_id] = self._users.get(aggregate_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[aggregate_id] -= 1
            if not self._users[aggregate_id]:
                del self._users[aggregate_id]
                del self._locks[aggregate_id]

    def __len__(self) -> int:
        return len(self._locks)
