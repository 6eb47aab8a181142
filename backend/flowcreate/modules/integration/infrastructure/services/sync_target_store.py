"""In-memory target-side store for sync runs."""

import copy
from typing import Any
from uuid import UUID

from flowcreate.modules.integration.domain.interfaces.services import ISyncTargetStore


class InMemorySyncTargetStore(ISyncTargetStore):
    """Keeps synced records per job, keyed by the job's key field."""

    def __init__(self):
        self._records: dict[UUID, dict[str, dict[str, Any]]] = {}

    async def get(self, job_id: UUID, key: str) -> dict[str, Any] | None:
        record = self._records.get(job_id, {}).get(key)
        return copy.deepcopy(record) if record is not None else None

    async def put(self, job_id: UUID, key: str, record: dict[str, Any]) -> None:
        self._records.setdefault(job_id, {})[key] = copy.deepcopy(record)

    def records_for(self, job_id: UUID) -> dict[str, dict[str, Any]]:
        return copy.deepcopy(self._records.get(job_id, {}))
