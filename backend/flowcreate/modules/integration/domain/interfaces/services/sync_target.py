"""Target-side record store used by sync runs."""

from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID


class ISyncTargetStore(ABC):
    """Keyed storage of records synced by a job."""

    @abstractmethod
    async def get(self, job_id: UUID, key: str) -> dict[str, Any] | None:
        """Existing target record for ``key``, or None."""

    @abstractmethod
    async def put(self, job_id: UUID, key: str, record: dict[str, Any]) -> None:
        """Create or replace the target record for ``key``."""
