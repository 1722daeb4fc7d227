"""
Contract tests shared by SqlRecordStore and InMemoryRecordStore.

Every test takes the parametrized `store` fixture (see conftest.py), so it
runs once against each implementation.

Run: python3 -m pytest db/__tests__/test_record_store_contract.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from models.job import EnrichmentStatus

START = datetime(2026, 1, 5, 12, 0, 0, tzinfo=timezone.utc)


class TestInsertAndGet:
    """Tests for insert(), get() and existing_fingerprints()."""

    def test_insert_then_get_round_trips_fields(self, store, make_record):
        """Inserted record comes back with payload and enrichment intact."""
        record = make_record(job_id="a", company="Acme", role="Backend Engineer")

        assert store.insert(record) is True

        stored = store.get("a")
        assert stored.id == "a"
        assert stored.fingerprint == record.fingerprint
        assert stored.payload["company"] == "Acme"
        assert stored.status == EnrichmentStatus.UNENRICHED
        assert stored.enrichment.attempts == 0
        assert stored.created_at == START

    def test_get_missing_returns_none(self, store):
        assert store.get("nope") is None

    def test_duplicate_fingerprint_is_rejected(self, store, make_record):
        """Second insert with the same fingerprint returns False and stores nothing."""
        first = make_record(job_id="a", role="Same Role")
        second = make_record(job_id="b", role="Same Role")

        assert store.insert(first) is True
        assert store.insert(second) is False
        assert store.get("b") is None

    def test_existing_fingerprints_returns_subset(self, store, make_record):
        record = make_record(job_id="a")
        store.insert(record)

        found = store.existing_fingerprints([record.fingerprint, "f" * 64])

        assert found == {record.fingerprint}

    def test_existing_fingerprints_empty_input(self, store):
        assert store.existing_fingerprints([]) == set()

    def test_insert_keeps_processing_state(self, store, make_record):
        """Seeded enrichment fields (used by tests and imports) are persisted."""
        store.insert(make_record(
            EnrichmentStatus.PROCESSING, job_id="p", attempts=2, last_attempt_at=START,
        ))

        stored = store.get("p")
        assert stored.status == EnrichmentStatus.PROCESSING
        assert stored.enrichment.attempts == 2
        assert stored.enrichment.last_attempt_at == START


class TestListByStatus:
    """Tests for list_by_status() and find_processing_before()."""

    def test_pending_ordered_by_queued_at(self, store, make_record):
        """Oldest queued first, regardless of insertion order."""
        store.insert(make_record(EnrichmentStatus.PENDING, job_id="late", queued_at=START + timedelta(minutes=5)))
        store.insert(make_record(EnrichmentStatus.PENDING, job_id="early", queued_at=START))
        store.insert(make_record(EnrichmentStatus.UNENRICHED, job_id="other"))

        pending = store.list_by_status(EnrichmentStatus.PENDING)

        assert [r.id for r in pending] == ["early", "late"]

    def test_limit(self, store, make_record):
        for i in range(5):
            store.insert(make_record(EnrichmentStatus.PENDING, job_id=f"j{i}", queued_at=START + timedelta(seconds=i)))

        assert [r.id for r in store.list_by_status(EnrichmentStatus.PENDING, limit=2)] == ["j0", "j1"]

    def test_find_processing_before_is_strict(self, store, make_record):
        """A record claimed exactly at the cutoff is not returned."""
        cutoff = START
        store.insert(make_record(EnrichmentStatus.PROCESSING, job_id="at", last_attempt_at=cutoff))
        store.insert(make_record(EnrichmentStatus.PROCESSING, job_id="before", last_attempt_at=cutoff - timedelta(seconds=1)))
        store.insert(make_record(EnrichmentStatus.PENDING, job_id="pending", last_attempt_at=cutoff - timedelta(hours=1)))

        stuck = store.find_processing_before(cutoff)

        assert [r.id for r in stuck] == ["before"]


class TestConditionalUpdate:
    """Tests for the compare-and-swap write."""

    def test_applies_when_status_matches(self, store, make_record):
        store.insert(make_record(EnrichmentStatus.PENDING, job_id="a"))

        updated = store.conditional_update(
            "a",
            [EnrichmentStatus.PENDING],
            EnrichmentStatus.PROCESSING,
            fields={"last_attempt_at": START},
            increment_attempts=True,
        )

        assert updated.status == EnrichmentStatus.PROCESSING
        assert updated.enrichment.attempts == 1
        assert updated.enrichment.version == 1
        assert updated.enrichment.last_attempt_at == START
        assert store.get("a").status == EnrichmentStatus.PROCESSING

    def test_returns_none_when_status_differs(self, store, make_record):
        """Guard mismatch leaves the record untouched."""
        store.insert(make_record(EnrichmentStatus.ENRICHED, job_id="a"))

        result = store.conditional_update("a", [EnrichmentStatus.PENDING], EnrichmentStatus.PROCESSING)

        assert result is None
        stored = store.get("a")
        assert stored.status == EnrichmentStatus.ENRICHED
        assert stored.enrichment.version == 0

    def test_second_claim_loses(self, store, make_record):
        """Two claims of the same record: exactly one wins."""
        store.insert(make_record(EnrichmentStatus.PENDING, job_id="a"))

        first = store.conditional_update("a", [EnrichmentStatus.PENDING], EnrichmentStatus.PROCESSING, increment_attempts=True)
        second = store.conditional_update("a", [EnrichmentStatus.PENDING], EnrichmentStatus.PROCESSING, increment_attempts=True)

        assert first is not None
        assert second is None
        assert store.get("a").enrichment.attempts == 1

    def test_missing_record_returns_none(self, store):
        assert store.conditional_update("nope", [EnrichmentStatus.PENDING], EnrichmentStatus.PROCESSING) is None

    def test_expected_attempts_guard(self, store, make_record):
        store.insert(make_record(EnrichmentStatus.PROCESSING, job_id="a", attempts=2, last_attempt_at=START))

        stale = store.conditional_update(
            "a", [EnrichmentStatus.PROCESSING], EnrichmentStatus.ENRICHED, expected_attempts=1,
        )
        current = store.conditional_update(
            "a", [EnrichmentStatus.PROCESSING], EnrichmentStatus.ENRICHED, expected_attempts=2,
        )

        assert stale is None
        assert current.status == EnrichmentStatus.ENRICHED

    def test_none_clears_field(self, store, make_record):
        store.insert(make_record(EnrichmentStatus.FAILED, job_id="a", last_error="timeout"))

        updated = store.conditional_update(
            "a", [EnrichmentStatus.FAILED], EnrichmentStatus.PENDING, fields={"last_error": None},
        )

        assert updated.enrichment.last_error is None

    def test_unknown_field_rejected(self, store, make_record):
        store.insert(make_record(EnrichmentStatus.PENDING, job_id="a"))

        with pytest.raises(ValueError):
            store.conditional_update("a", [EnrichmentStatus.PENDING], EnrichmentStatus.PROCESSING, fields={"payload": {}})


class TestBulkAndCounts:
    """Tests for bulk_transition(), count_by_status() and sum_attempts()."""

    def test_bulk_transition_moves_only_matching(self, store, make_record):
        store.insert(make_record(EnrichmentStatus.FAILED, job_id="f1", attempts=1))
        store.insert(make_record(EnrichmentStatus.FAILED, job_id="f2", attempts=3))
        store.insert(make_record(EnrichmentStatus.ENRICHED, job_id="e1", attempts=1))

        moved = store.bulk_transition(
            EnrichmentStatus.FAILED, EnrichmentStatus.PENDING, fields={"last_error": None, "queued_at": START},
        )

        assert moved == 2
        assert store.get("f1").status == EnrichmentStatus.PENDING
        assert store.get("f1").enrichment.last_error is None
        assert store.get("f2").enrichment.attempts == 3
        assert store.get("e1").status == EnrichmentStatus.ENRICHED
        assert store.get("e1").enrichment.version == 0

    def test_bulk_transition_nothing_to_move(self, store):
        assert store.bulk_transition(EnrichmentStatus.UNENRICHED, EnrichmentStatus.PENDING) == 0

    def test_counts_and_attempts(self, store, make_record):
        store.insert(make_record(EnrichmentStatus.UNENRICHED, job_id="u"))
        store.insert(make_record(EnrichmentStatus.PENDING, job_id="p", attempts=1))
        store.insert(make_record(EnrichmentStatus.FAILED, job_id="f", attempts=2))

        counts = store.count_by_status()

        assert counts[EnrichmentStatus.UNENRICHED] == 1
        assert counts[EnrichmentStatus.PENDING] == 1
        assert counts[EnrichmentStatus.FAILED] == 1
        assert counts.get(EnrichmentStatus.ENRICHED, 0) == 0
        assert store.sum_attempts() == 3

    def test_sum_attempts_empty(self, store):
        assert store.sum_attempts() == 0
