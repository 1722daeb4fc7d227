"""
Record store contract for job records.

The scraper and the enrichment queue only talk to storage through this
interface. Implementations:
- db.sql_store.SqlRecordStore: SQLAlchemy session (PostgreSQL in production)
- db.memory_store.InMemoryRecordStore: thread-safe fake for tests/local runs

The single concurrency primitive is conditional_update(): the write happens
only if the record's status is still one of `from_statuses` at write time.
"""

from datetime import datetime
from typing import Any, Iterable, Optional, Protocol

from models.job import EnrichmentStatus
from models.records import JobRecord

# Enrichment fields a transition may set (None clears the field)
ENRICHMENT_FIELDS = frozenset({
    "queued_at",
    "last_attempt_at",
    "enriched_at",
    "last_error",
    "enriched_fields",
})

# Max values per IN (...) clause / batch when scanning fingerprints
FINGERPRINT_CHUNK_SIZE = 500


def check_fields(fields: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Validate transition fields and return a copy."""
    fields = dict(fields or {})
    unknown = set(fields) - ENRICHMENT_FIELDS
    if unknown:
        raise ValueError(f"Unknown enrichment fields: {sorted(unknown)}")
    return fields


class RecordStore(Protocol):
    """Storage operations the pipeline depends on."""

    def get(self, job_id: str) -> Optional[JobRecord]:
        """Fetch one record by id."""
        ...

    def insert(self, record: JobRecord) -> bool:
        """Insert a new record. Returns False if its fingerprint already exists."""
        ...

    def existing_fingerprints(self, fingerprints: Iterable[str]) -> set[str]:
        """Return the subset of `fingerprints` already stored."""
        ...

    def list_by_status(self, status: EnrichmentStatus, limit: Optional[int] = None) -> list[JobRecord]:
        """Records in `status`, oldest queued first."""
        ...

    def find_processing_before(self, cutoff: datetime) -> list[JobRecord]:
        """Processing records whose last claim is strictly older than `cutoff`."""
        ...

    def conditional_update(
        self,
        job_id: str,
        from_statuses: Iterable[EnrichmentStatus],
        to_status: EnrichmentStatus,
        fields: Optional[dict[str, Any]] = None,
        increment_attempts: bool = False,
        expected_attempts: Optional[int] = None,
    ) -> Optional[JobRecord]:
        """
        Atomically move a record to `to_status` if its current status is in
        `from_statuses` (and, when given, its attempts equal `expected_attempts`).

        Returns the updated record, or None if the guard did not match
        (missing record, other status, or a concurrent writer won).
        """
        ...

    def bulk_transition(
        self,
        from_status: EnrichmentStatus,
        to_status: EnrichmentStatus,
        fields: Optional[dict[str, Any]] = None,
    ) -> int:
        """Move every record in `from_status` to `to_status`. Returns the count moved."""
        ...

    def count_by_status(self) -> dict[EnrichmentStatus, int]:
        """Record counts keyed by status (statuses with no records may be absent)."""
        ...

    def sum_attempts(self) -> int:
        """Sum of enrichment attempts across all records."""
        ...
