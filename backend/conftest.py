"""
Pytest configuration and fixtures for testing.

Tests never touch a real database:
- SQL store tests run against an in-memory SQLite engine (schema from Base.metadata)
- Everything else uses InMemoryRecordStore
- Migration tests run Alembic against a temporary SQLite file

DATABASE_URL must exist before db.session is imported, so a SQLite URL is
set here unless the environment already provides one.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db.memory_store import InMemoryRecordStore
from db.sql_store import SqlRecordStore
from models import Base
from models.job import EnrichmentStatus
from models.records import Enrichment, JobRecord
from utils.fingerprint import compute_fingerprint

START = datetime(2026, 1, 5, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Injectable clock: call it for the current time, advance() to move it."""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def build_record(
    status: EnrichmentStatus = EnrichmentStatus.UNENRICHED,
    job_id: Optional[str] = None,
    company: str = "Acme",
    role: Optional[str] = None,
    attempts: int = 0,
    queued_at: Optional[datetime] = None,
    last_attempt_at: Optional[datetime] = None,
    last_error: Optional[str] = None,
    enriched_fields: Optional[dict[str, Any]] = None,
    created_at: Optional[datetime] = START,
) -> JobRecord:
    """JobRecord with a unique fingerprint and the given enrichment state."""
    job_id = job_id or uuid.uuid4().hex
    role = role or f"Engineer {job_id}"
    if status == EnrichmentStatus.PENDING and queued_at is None:
        queued_at = created_at
    if status == EnrichmentStatus.FAILED and last_error is None:
        last_error = "boom"
    if status == EnrichmentStatus.ENRICHED and enriched_fields is None:
        enriched_fields = {"tags": ["Python"]}
    return JobRecord(
        id=job_id,
        fingerprint=compute_fingerprint("test", company, role, "Remote", ""),
        source_name="test",
        payload={"company": company, "role": role, "location": "Remote", "description": ""},
        enrichment=Enrichment(
            status=status,
            attempts=attempts,
            queued_at=queued_at,
            last_attempt_at=last_attempt_at,
            last_error=last_error,
            enriched_fields=enriched_fields,
        ),
        created_at=created_at,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_record():
    """
    Record factory.

    Usage:
        def test_claim(make_record):
            record = make_record(EnrichmentStatus.PENDING, job_id="a")
    """
    return build_record


@pytest.fixture
def sqlite_engine():
    """Fresh in-memory SQLite database per test, shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(sqlite_engine):
    session = sessionmaker(bind=sqlite_engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sql_store(db_session) -> SqlRecordStore:
    return SqlRecordStore(db_session)


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Runs the test once per record store implementation."""
    if request.param == "sql":
        return request.getfixturevalue("sql_store")
    return request.getfixturevalue("memory_store")
