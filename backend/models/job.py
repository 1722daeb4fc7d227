from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from models import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JsonColumn = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


class EnrichmentStatus(str, Enum):
    """
    Enrichment lifecycle of a job record.

    Status flow: unenriched → pending → processing → enriched/failed
    failed → pending only through an explicit reset.
    """
    UNENRICHED = "unenriched"
    PENDING = "pending"
    PROCESSING = "processing"
    ENRICHED = "enriched"
    FAILED = "failed"


# Edges a worker or bulk operation may take
TRANSITIONS: dict[EnrichmentStatus, frozenset[EnrichmentStatus]] = {
    EnrichmentStatus.UNENRICHED: frozenset({EnrichmentStatus.PENDING}),
    EnrichmentStatus.PENDING: frozenset({EnrichmentStatus.PROCESSING}),
    EnrichmentStatus.PROCESSING: frozenset({EnrichmentStatus.ENRICHED, EnrichmentStatus.FAILED}),
    EnrichmentStatus.FAILED: frozenset({EnrichmentStatus.PENDING}),
    EnrichmentStatus.ENRICHED: frozenset(),
}

# Operator-only override: recover a stuck record
OPERATOR_TRANSITIONS: dict[EnrichmentStatus, frozenset[EnrichmentStatus]] = {
    EnrichmentStatus.PROCESSING: frozenset({EnrichmentStatus.PENDING}),
}


def allowed_sources(
    target: EnrichmentStatus,
    include_operator: bool = False,
) -> frozenset[EnrichmentStatus]:
    """Return every status that may move to `target`."""
    sources = {status for status, targets in TRANSITIONS.items() if target in targets}
    if include_operator:
        sources |= {status for status, targets in OPERATOR_TRANSITIONS.items() if target in targets}
    return frozenset(sources)


class Job(Base):
    """
    Model for scraped job postings and their enrichment state.

    Unique constraint: fingerprint
    """
    __tablename__ = "jobs"
    __table_args__ = (
        Index("ix_jobs_status_queued_at", "enrichment_status", "queued_at"),
        Index("ix_jobs_status_last_attempt_at", "enrichment_status", "last_attempt_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    fingerprint: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    source_name: Mapped[str] = mapped_column(String(50), nullable=False)
    source_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Raw scraped fields (company, role, description, location, url, ...)
    payload: Mapped[Dict[str, Any]] = mapped_column(JsonColumn, nullable=False, default=dict)

    enrichment_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=EnrichmentStatus.UNENRICHED.value,
        index=True,
    )
    enrichment_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    enrichment_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    queued_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_attempt_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    enriched_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    last_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    enriched_fields: Mapped[Optional[Dict[str, Any]]] = mapped_column(JsonColumn, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<Job(id='{self.id}', fingerprint='{self.fingerprint[:12]}', status='{self.enrichment_status}')>"
