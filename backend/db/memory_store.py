"""
In-memory record store.

Implements the same conditional-write contract as SqlRecordStore, with a
single lock serializing every read-check-write. Used by tests and local
dry runs.
"""

import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from db.record_store import check_fields
from models.job import EnrichmentStatus
from models.records import JobRecord

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class InMemoryRecordStore:
    """Dict-backed record store keyed by job id."""

    def __init__(self, records: Iterable[JobRecord] = ()):
        self._lock = threading.Lock()
        self._records: dict[str, JobRecord] = {}
        self._fingerprints: set[str] = set()
        for record in records:
            self.insert(record)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, job_id: str) -> Optional[JobRecord]:
        with self._lock:
            return self._records.get(job_id)

    def all(self) -> list[JobRecord]:
        with self._lock:
            return list(self._records.values())

    def insert(self, record: JobRecord) -> bool:
        with self._lock:
            if record.fingerprint in self._fingerprints or record.id in self._records:
                return False
            if record.created_at is None:
                record = replace(record, created_at=datetime.now(timezone.utc))
            self._records[record.id] = record
            self._fingerprints.add(record.fingerprint)
            return True

    def existing_fingerprints(self, fingerprints: Iterable[str]) -> set[str]:
        with self._lock:
            return {fp for fp in fingerprints if fp in self._fingerprints}

    def list_by_status(self, status: EnrichmentStatus, limit: Optional[int] = None) -> list[JobRecord]:
        with self._lock:
            matches = [r for r in self._records.values() if r.status == status]
        matches.sort(key=lambda r: (r.enrichment.queued_at or _EPOCH, r.created_at or _EPOCH, r.id))
        return matches if limit is None else matches[:limit]

    def find_processing_before(self, cutoff: datetime) -> list[JobRecord]:
        with self._lock:
            stuck = [
                r for r in self._records.values()
                if r.status == EnrichmentStatus.PROCESSING
                and r.enrichment.last_attempt_at is not None
                and r.enrichment.last_attempt_at < cutoff
            ]
        stuck.sort(key=lambda r: r.enrichment.last_attempt_at)
        return stuck

    def conditional_update(
        self,
        job_id: str,
        from_statuses: Iterable[EnrichmentStatus],
        to_status: EnrichmentStatus,
        fields: Optional[dict[str, Any]] = None,
        increment_attempts: bool = False,
        expected_attempts: Optional[int] = None,
    ) -> Optional[JobRecord]:
        changes = check_fields(fields)
        allowed = set(from_statuses)
        with self._lock:
            record = self._records.get(job_id)
            if record is None or record.status not in allowed:
                return None
            if expected_attempts is not None and record.enrichment.attempts != expected_attempts:
                return None
            updated = self._apply(record, to_status, changes, increment_attempts)
            self._records[job_id] = updated
            return updated

    def bulk_transition(
        self,
        from_status: EnrichmentStatus,
        to_status: EnrichmentStatus,
        fields: Optional[dict[str, Any]] = None,
    ) -> int:
        changes = check_fields(fields)
        moved = 0
        with self._lock:
            for job_id, record in list(self._records.items()):
                if record.status != from_status:
                    continue
                self._records[job_id] = self._apply(record, to_status, changes, False)
                moved += 1
        return moved

    def count_by_status(self) -> dict[EnrichmentStatus, int]:
        counts: dict[EnrichmentStatus, int] = {}
        with self._lock:
            for record in self._records.values():
                counts[record.status] = counts.get(record.status, 0) + 1
        return counts

    def sum_attempts(self) -> int:
        with self._lock:
            return sum(r.enrichment.attempts for r in self._records.values())

    @staticmethod
    def _apply(
        record: JobRecord,
        to_status: EnrichmentStatus,
        changes: dict[str, Any],
        increment_attempts: bool,
    ) -> JobRecord:
        enrichment = record.enrichment
        return record.with_enrichment(
            status=to_status,
            version=enrichment.version + 1,
            attempts=enrichment.attempts + (1 if increment_attempts else 0),
            **changes,
        )
