"""
Enrichment queue: the status state machine over the record store

Status flow:
    unenriched ──enqueue──► pending ──claim──► processing ──► enriched
                               ▲                   │
                               └──── reset ◄─── failed
    processing ──► pending only through an operator force on a stuck record

Every write is one store.conditional_update() whose `from_statuses` come from
models.job.TRANSITIONS, so two workers can never both claim a record and a
completion can never land on a record that is no longer `processing`.

Usage:
    queue = EnrichmentQueue(SqlRecordStore(db))
    queue.enqueue_all_unenriched()
    for record in queue.claim_batch(10):
        ...
        queue.complete_success(record.id, fields, attempt=record.enrichment.attempts)
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from db.record_store import RecordStore
from models.job import EnrichmentStatus, allowed_sources
from models.records import EnrichmentStats, JobRecord
from utils.clock import utc_now
from utils.errors import InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_STUCK_TIMEOUT = timedelta(minutes=15)


class EnrichmentQueue:
    """State-machine-backed enrichment queue."""

    def __init__(
        self,
        store: RecordStore,
        stuck_timeout: timedelta = DEFAULT_STUCK_TIMEOUT,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.stuck_timeout = stuck_timeout
        self.clock = clock

    @classmethod
    def from_settings(cls, store: RecordStore, settings, clock: Callable[[], datetime] = utc_now) -> "EnrichmentQueue":
        return cls(
            store,
            stuck_timeout=timedelta(minutes=settings.STUCK_JOB_TIMEOUT_MINUTES),
            clock=clock,
        )

    # =========================================================================
    # Enqueue
    # =========================================================================

    def enqueue_one(self, job_id: str, force: bool = False) -> JobRecord:
        """
        Move one record to `pending`.

        unenriched/failed -> pending. pending, processing and enriched are
        left as they are, except that force=True re-queues a processing record
        whose claim is stuck (older than the stuck timeout).

        Raises:
            NotFoundError: no record with this id
            InvalidStateError: force on a processing record that is not stuck
        """
        record = self.store.get(job_id)
        if record is None:
            raise NotFoundError(job_id)

        now = self.clock()
        status = record.status

        if status in allowed_sources(EnrichmentStatus.PENDING):
            updated = self.store.conditional_update(
                job_id,
                [status],
                EnrichmentStatus.PENDING,
                fields={"queued_at": now, "last_error": None},
            )
            if updated is None:
                # Someone else moved it first; report where it is now
                return self.store.get(job_id) or record
            logger.info(f"Enqueued job {job_id} ({status.value} -> pending)")
            return updated

        if status == EnrichmentStatus.PROCESSING and force:
            return self._recover_stuck(record, now)

        logger.info(f"Enqueue of job {job_id} is a no-op (status={status.value})")
        return record

    def _recover_stuck(self, record: JobRecord, now: datetime) -> JobRecord:
        """Operator override: processing -> pending, only when the claim is stuck."""
        if not self._is_stuck(record, now, self.stuck_timeout):
            raise InvalidStateError(
                f"Job {record.id} is processing and not stuck; refusing to re-queue",
                job_id=record.id,
                status=record.status.value,
            )

        updated = self.store.conditional_update(
            record.id,
            allowed_sources(EnrichmentStatus.PENDING, include_operator=True) & {EnrichmentStatus.PROCESSING},
            EnrichmentStatus.PENDING,
            fields={"queued_at": now},
            expected_attempts=record.enrichment.attempts,
        )
        if updated is None:
            raise InvalidStateError(
                f"Job {record.id} changed while being recovered",
                job_id=record.id,
            )
        logger.warning(
            f"Recovered stuck job {record.id} (attempt {record.enrichment.attempts}, "
            f"last claimed {record.enrichment.last_attempt_at})"
        )
        return updated

    def enqueue_all_unenriched(self) -> int:
        """Move every unenriched record to pending. Returns the count moved."""
        moved = self._bulk(
            EnrichmentStatus.UNENRICHED,
            EnrichmentStatus.PENDING,
            {"queued_at": self.clock()},
        )
        logger.info(f"Enqueued {moved} unenriched jobs")
        return moved

    def reset_failed(self) -> int:
        """Move every failed record back to pending, clearing last_error."""
        moved = self._bulk(
            EnrichmentStatus.FAILED,
            EnrichmentStatus.PENDING,
            {"queued_at": self.clock(), "last_error": None},
        )
        logger.info(f"Reset {moved} failed jobs to pending")
        return moved

    def _bulk(self, from_status: EnrichmentStatus, to_status: EnrichmentStatus, fields: dict[str, Any]) -> int:
        if from_status not in allowed_sources(to_status):
            raise InvalidStateError(f"No transition {from_status.value} -> {to_status.value}")
        return self.store.bulk_transition(from_status, to_status, fields)

    # =========================================================================
    # Claim / complete
    # =========================================================================

    def claim_batch(self, limit: int) -> list[JobRecord]:
        """
        Claim up to `limit` pending records, oldest queued first.

        Each claim is an atomic pending -> processing write that bumps
        attempts and stamps last_attempt_at. Records another worker claimed
        first are skipped, so the batch may come back short.
        """
        if limit <= 0:
            return []

        now = self.clock()
        claimed: list[JobRecord] = []
        for candidate in self.store.list_by_status(EnrichmentStatus.PENDING, limit=limit):
            record = self.store.conditional_update(
                candidate.id,
                allowed_sources(EnrichmentStatus.PROCESSING),
                EnrichmentStatus.PROCESSING,
                fields={"last_attempt_at": now},
                increment_attempts=True,
            )
            if record is not None:
                claimed.append(record)
        return claimed

    def complete_success(
        self,
        job_id: str,
        enriched_fields: dict[str, Any],
        attempt: Optional[int] = None,
    ) -> JobRecord:
        """
        processing -> enriched, storing the provider output.

        `attempt` is the attempts value returned by the claim; when given, a
        record that was recovered and re-claimed since is rejected.

        Raises:
            NotFoundError: no record with this id
            InvalidStateError: record is not processing (or the attempt is stale)
        """
        updated = self.store.conditional_update(
            job_id,
            allowed_sources(EnrichmentStatus.ENRICHED),
            EnrichmentStatus.ENRICHED,
            fields={
                "enriched_fields": dict(enriched_fields),
                "enriched_at": self.clock(),
                "last_error": None,
            },
            expected_attempts=attempt,
        )
        if updated is None:
            self._raise_rejected(job_id, EnrichmentStatus.ENRICHED, attempt)
        return updated

    def complete_failure(self, job_id: str, error_reason: str, attempt: Optional[int] = None) -> JobRecord:
        """
        processing -> failed, recording the reason.

        Raises:
            NotFoundError: no record with this id
            InvalidStateError: record is not processing (or the attempt is stale)
        """
        updated = self.store.conditional_update(
            job_id,
            allowed_sources(EnrichmentStatus.FAILED),
            EnrichmentStatus.FAILED,
            fields={"last_error": error_reason, "enriched_fields": None},
            expected_attempts=attempt,
        )
        if updated is None:
            self._raise_rejected(job_id, EnrichmentStatus.FAILED, attempt)
        return updated

    def _raise_rejected(self, job_id: str, target: EnrichmentStatus, attempt: Optional[int]) -> None:
        """Explain why a guarded completion did not apply."""
        record = self.store.get(job_id)
        if record is None:
            raise NotFoundError(job_id)
        if record.status not in allowed_sources(target):
            raise InvalidStateError(
                f"Job {job_id} is {record.status.value}, cannot move to {target.value}",
                job_id=job_id,
                status=record.status.value,
            )
        raise InvalidStateError(
            f"Job {job_id} attempt {attempt} is stale (current attempt {record.enrichment.attempts})",
            job_id=job_id,
            status=record.status.value,
        )

    # =========================================================================
    # Observation
    # =========================================================================

    def get_stats(self) -> EnrichmentStats:
        return EnrichmentStats.from_counts(self.store.count_by_status(), self.store.sum_attempts())

    def get_stuck_jobs(self, timeout: Optional[timedelta] = None) -> list[JobRecord]:
        """Processing records claimed more than `timeout` ago (strictly). Read-only."""
        cutoff = self.clock() - (timeout if timeout is not None else self.stuck_timeout)
        return self.store.find_processing_before(cutoff)

    @staticmethod
    def _is_stuck(record: JobRecord, now: datetime, timeout: timedelta) -> bool:
        last = record.enrichment.last_attempt_at
        return (
            record.status == EnrichmentStatus.PROCESSING
            and last is not None
            and now - last > timeout
        )
