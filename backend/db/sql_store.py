"""
SQLAlchemy implementation of the record store.

Every status transition is a single guarded UPDATE:

    UPDATE jobs SET enrichment_status = :to, ...
    WHERE id = :id AND enrichment_status IN (:from...)

and rowcount tells us whether we won the race, same idempotent-guard
pattern as run finalization.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db.record_store import FINGERPRINT_CHUNK_SIZE, check_fields
from models.job import EnrichmentStatus, Job
from models.records import Enrichment, JobRecord

logger = logging.getLogger(__name__)


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_record(job: Job) -> JobRecord:
    """Convert a Job row into a JobRecord snapshot."""
    return JobRecord(
        id=job.id,
        fingerprint=job.fingerprint,
        source_name=job.source_name,
        source_id=job.source_id,
        payload=dict(job.payload or {}),
        created_at=_utc(job.created_at),
        enrichment=Enrichment(
            status=EnrichmentStatus(job.enrichment_status),
            attempts=job.enrichment_attempts,
            version=job.enrichment_version,
            queued_at=_utc(job.queued_at),
            last_attempt_at=_utc(job.last_attempt_at),
            enriched_at=_utc(job.enriched_at),
            last_error=job.last_error,
            enriched_fields=job.enriched_fields,
        ),
    )


class SqlRecordStore:
    """Record store backed by the `jobs` table."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, job_id: str) -> Optional[JobRecord]:
        job = self.db.execute(
            select(Job)
            .where(Job.id == job_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return to_record(job) if job else None

    def insert(self, record: JobRecord) -> bool:
        enrichment = record.enrichment
        job = Job(
            id=record.id,
            fingerprint=record.fingerprint,
            source_name=record.source_name,
            source_id=record.source_id,
            payload=record.payload,
            enrichment_status=enrichment.status.value,
            enrichment_attempts=enrichment.attempts,
            enrichment_version=enrichment.version,
            queued_at=enrichment.queued_at,
            last_attempt_at=enrichment.last_attempt_at,
            enriched_at=enrichment.enriched_at,
            last_error=enrichment.last_error,
            enriched_fields=enrichment.enriched_fields,
        )
        if record.created_at is not None:
            job.created_at = record.created_at

        self.db.add(job)
        try:
            self.db.commit()
        except IntegrityError:
            # Overlapping scrape inserted the same fingerprint first
            self.db.rollback()
            logger.info(f"Fingerprint {record.fingerprint[:12]} already stored, skipping insert")
            return False
        return True

    def existing_fingerprints(self, fingerprints: Iterable[str]) -> set[str]:
        wanted = list(dict.fromkeys(fingerprints))
        found: set[str] = set()
        for i in range(0, len(wanted), FINGERPRINT_CHUNK_SIZE):
            chunk = wanted[i:i + FINGERPRINT_CHUNK_SIZE]
            rows = self.db.execute(
                select(Job.fingerprint).where(Job.fingerprint.in_(chunk))
            )
            found.update(row[0] for row in rows)
        return found

    def list_by_status(self, status: EnrichmentStatus, limit: Optional[int] = None) -> list[JobRecord]:
        stmt = (
            select(Job)
            .where(Job.enrichment_status == status.value)
            .order_by(Job.queued_at, Job.created_at, Job.id)
            .execution_options(populate_existing=True)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return [to_record(job) for job in self.db.execute(stmt).scalars()]

    def find_processing_before(self, cutoff: datetime) -> list[JobRecord]:
        stmt = (
            select(Job)
            .where(
                Job.enrichment_status == EnrichmentStatus.PROCESSING.value,
                Job.last_attempt_at < cutoff,
            )
            .order_by(Job.last_attempt_at)
            .execution_options(populate_existing=True)
        )
        return [to_record(job) for job in self.db.execute(stmt).scalars()]

    def conditional_update(
        self,
        job_id: str,
        from_statuses: Iterable[EnrichmentStatus],
        to_status: EnrichmentStatus,
        fields: Optional[dict[str, Any]] = None,
        increment_attempts: bool = False,
        expected_attempts: Optional[int] = None,
    ) -> Optional[JobRecord]:
        values: dict[str, Any] = check_fields(fields)
        values["enrichment_status"] = to_status.value
        values["enrichment_version"] = Job.enrichment_version + 1
        if increment_attempts:
            values["enrichment_attempts"] = Job.enrichment_attempts + 1

        stmt = update(Job).where(
            Job.id == job_id,
            Job.enrichment_status.in_([status.value for status in from_statuses]),
        )
        if expected_attempts is not None:
            stmt = stmt.where(Job.enrichment_attempts == expected_attempts)

        result = self.db.execute(
            stmt.values(**values).execution_options(synchronize_session=False)
        )
        self.db.commit()

        # rowcount == 1 means our guarded write won
        if result.rowcount != 1:
            return None
        return self.get(job_id)

    def bulk_transition(
        self,
        from_status: EnrichmentStatus,
        to_status: EnrichmentStatus,
        fields: Optional[dict[str, Any]] = None,
    ) -> int:
        values: dict[str, Any] = check_fields(fields)
        values["enrichment_status"] = to_status.value
        values["enrichment_version"] = Job.enrichment_version + 1

        result = self.db.execute(
            update(Job)
            .where(Job.enrichment_status == from_status.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount

    def count_by_status(self) -> dict[EnrichmentStatus, int]:
        rows = self.db.execute(
            select(Job.enrichment_status, func.count()).group_by(Job.enrichment_status)
        )
        return {EnrichmentStatus(status): count for status, count in rows}

    def sum_attempts(self) -> int:
        total = self.db.execute(
            select(func.coalesce(func.sum(Job.enrichment_attempts), 0))
        ).scalar()
        return int(total or 0)
