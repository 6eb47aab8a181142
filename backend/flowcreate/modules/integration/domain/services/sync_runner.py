"""Sync job runner: pushes one batch of records through a mapping into a target."""

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from flowcreate.core.domain.base import DomainService, utc_now
from flowcreate.core.errors import FlowCreateError
from flowcreate.core.logging import get_logger
from flowcreate.modules.integration.domain.aggregates import DataMapping, SyncJob
from flowcreate.modules.integration.domain.enums import ConflictResolution
from flowcreate.modules.integration.domain.interfaces.services import ISyncTargetStore
from flowcreate.modules.integration.domain.services.data_transformation import (
    DataTransformationService,
    TransformationContext,
)
from flowcreate.modules.integration.domain.value_objects import FieldError, SyncRunSummary

logger = get_logger(__name__)


def merge_records(existing: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    """Field-by-field union; nested objects merge recursively, incoming wins ties."""
    merged = dict(existing)
    for key, value in incoming.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_records(current, value)
        else:
            merged[key] = value
    return merged


class SyncJobRunner(DomainService):
    """Runs one batch of a sync job.

    Only the first ``batch_size`` records are processed; the rest are
    reported as deferred. A record that cannot be transformed or keyed is
    counted as failed and the batch carries on. Direction does not change
    how records are applied: the caller decides where records come from.
    """

    def __init__(
        self,
        transformation_service: DataTransformationService | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._transformation = transformation_service or DataTransformationService()
        self._clock = clock

    async def run(
        self,
        job: SyncJob,
        mapping: DataMapping | None,
        records: Sequence[Any],
        target_store: ISyncTargetStore,
        lookup_tables: dict[str, dict[str, Any]] | None = None,
    ) -> SyncRunSummary:
        """Run ``job`` over ``records`` and record the outcome on the job.

        Raises:
            PreconditionFailedError: If the job is already running
            FlowCreateError: If the target store fails; the job is marked failed
        """
        job.start_run()
        started_at = self._clock()
        try:
            summary = await self._process(
                job, mapping, records, target_store, lookup_tables or {}, started_at
            )
        except FlowCreateError as e:
            job.fail_run(e.message, self._clock())
            logger.warning(
                "Sync run failed",
                job_id=str(job.id),
                error=e.message,
                retry_count=job.retry_count,
            )
            raise

        job.complete_run(summary, summary.finished_at)
        logger.info(
            "Sync run completed",
            job_id=str(job.id),
            processed=summary.records_processed,
            succeeded=summary.succeeded,
            failed=summary.failed,
            skipped=summary.skipped,
            conflicts=summary.conflicts,
            deferred=summary.deferred,
        )
        return summary

    async def _process(
        self,
        job: SyncJob,
        mapping: DataMapping | None,
        records: Sequence[Any],
        target_store: ISyncTargetStore,
        lookup_tables: dict[str, dict[str, Any]],
        started_at: datetime,
    ) -> SyncRunSummary:
        batch = list(records[: job.batch_size])
        deferred = max(len(records) - len(batch), 0)

        succeeded = failed = skipped = conflicts = 0
        errors: list[FieldError] = []

        for index, record in enumerate(batch):
            label = f"records[{index}]"
            if not isinstance(record, dict):
                failed += 1
                errors.append(FieldError(label, "Record must be an object"))
                continue

            incoming = record
            if mapping is not None:
                result = self._transformation.transform(
                    mapping,
                    TransformationContext(
                        source_data=record,
                        target_schema=job.target_schema,
                        owner_id=job.owner_id,
                        execution_id=f"sync_{job.id}",
                        lookup_tables=lookup_tables,
                    ),
                )
                if not result.success:
                    failed += 1
                    errors.extend(
                        FieldError(
                            f"{label}.{error.field}" if error.field else label,
                            error.message,
                        )
                        for error in result.errors
                    )
                    continue
                incoming = result.transformed_data

            key = incoming.get(job.key_field, record.get(job.key_field))
            if key is None:
                failed += 1
                errors.append(
                    FieldError(label, f"Record has no key field '{job.key_field}'")
                )
                continue

            key = str(key)
            existing = await target_store.get(job.id, key)
            if existing is None:
                await target_store.put(job.id, key, incoming)
                succeeded += 1
                continue

            conflicts += 1
            if job.conflict_resolution == ConflictResolution.TARGET_WINS:
                skipped += 1
            elif job.conflict_resolution == ConflictResolution.MERGE:
                await target_store.put(job.id, key, merge_records(existing, incoming))
                succeeded += 1
            else:
                await target_store.put(job.id, key, incoming)
                succeeded += 1

        return SyncRunSummary(
            started_at=started_at,
            finished_at=self._clock(),
            records_processed=len(batch),
            succeeded=succeeded,
            failed=failed,
            skipped=skipped,
            conflicts=conflicts,
            deferred=deferred,
            errors=tuple(errors),
        )

    def __str__(self) -> str:
        return "SyncJobRunner"
