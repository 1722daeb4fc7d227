"""
Plain record types shared by the record stores, the scraper and the queue.

Stores hand out JobRecord snapshots, never live ORM objects, so the queue
behaves the same against SqlRecordStore and InMemoryRecordStore.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Optional

from models.job import EnrichmentStatus


@dataclass(frozen=True)
class Enrichment:
    """Enrichment sub-record of a job."""
    status: EnrichmentStatus = EnrichmentStatus.UNENRICHED
    attempts: int = 0
    version: int = 0
    queued_at: Optional[datetime] = None
    last_attempt_at: Optional[datetime] = None
    enriched_at: Optional[datetime] = None
    last_error: Optional[str] = None
    enriched_fields: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "attempts": self.attempts,
            "version": self.version,
            "queued_at": _iso(self.queued_at),
            "last_attempt_at": _iso(self.last_attempt_at),
            "enriched_at": _iso(self.enriched_at),
            "last_error": self.last_error,
            "enriched_fields": self.enriched_fields,
        }


@dataclass(frozen=True)
class JobRecord:
    """
    One external job posting plus its enrichment state.

    `id` and `fingerprint` never change after insertion.
    """
    id: str
    fingerprint: str
    source_name: str
    payload: dict[str, Any] = field(default_factory=dict)
    source_id: Optional[str] = None
    enrichment: Enrichment = field(default_factory=Enrichment)
    created_at: Optional[datetime] = None

    @property
    def status(self) -> EnrichmentStatus:
        return self.enrichment.status

    def with_enrichment(self, **changes: Any) -> "JobRecord":
        return replace(self, enrichment=replace(self.enrichment, **changes))

    def summary(self) -> dict:
        """Short form used by the operator surface (stuck job listings)."""
        return {
            "id": self.id,
            "company": self.payload.get("company"),
            "role": self.payload.get("role"),
            "status": self.status.value,
            "attempts": self.enrichment.attempts,
            "last_attempt_at": _iso(self.enrichment.last_attempt_at),
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fingerprint": self.fingerprint,
            "source_name": self.source_name,
            "source_id": self.source_id,
            "payload": self.payload,
            "enrichment": self.enrichment.to_dict(),
            "created_at": _iso(self.created_at),
        }


@dataclass
class EnrichmentStats:
    """
    Record counts per enrichment status.

    The per-status counts always add up to `total`.
    """
    unenriched: int = 0
    pending: int = 0
    processing: int = 0
    enriched: int = 0
    failed: int = 0
    total_attempts: int = 0

    @property
    def total(self) -> int:
        return self.unenriched + self.pending + self.processing + self.enriched + self.failed

    @classmethod
    def from_counts(cls, counts: dict[EnrichmentStatus, int], total_attempts: int) -> "EnrichmentStats":
        return cls(
            unenriched=counts.get(EnrichmentStatus.UNENRICHED, 0),
            pending=counts.get(EnrichmentStatus.PENDING, 0),
            processing=counts.get(EnrichmentStatus.PROCESSING, 0),
            enriched=counts.get(EnrichmentStatus.ENRICHED, 0),
            failed=counts.get(EnrichmentStatus.FAILED, 0),
            total_attempts=total_attempts,
        )

    def to_dict(self) -> dict:
        return {
            "unenriched": self.unenriched,
            "pending": self.pending,
            "processing": self.processing,
            "enriched": self.enriched,
            "failed": self.failed,
            "total": self.total,
            "total_attempts": self.total_attempts,
        }


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
