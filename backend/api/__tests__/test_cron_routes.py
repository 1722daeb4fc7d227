"""
Tests for the scheduler endpoints.

Run: python3 -m pytest api/__tests__/test_cron_routes.py -v
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_provider, get_queue, get_record_store, get_sources
from config.settings import settings
from enrichment.provider import BasicEnrichmentProvider
from enrichment.queue import EnrichmentQueue
from main import app
from models.job import EnrichmentStatus
from scraping.types import ScrapeResult

SECRET = "cron-test-secret"
AUTH = {"Authorization": f"Bearer {SECRET}"}


@pytest.fixture
def client(memory_store, clock, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", SECRET)
    app.dependency_overrides[get_record_store] = lambda: memory_store
    app.dependency_overrides[get_queue] = lambda: EnrichmentQueue(memory_store, clock=clock)
    app.dependency_overrides[get_provider] = lambda: BasicEnrichmentProvider()
    app.dependency_overrides[get_sources] = lambda: []
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestCronAuth:
    """Tests for the cron secret guard."""

    @pytest.mark.parametrize("path", ["/cron/scrape", "/cron/enrich"])
    def test_missing_secret_header(self, client, path):
        assert client.post(path).status_code == 401

    def test_secret_not_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "CRON_SECRET", "")

        assert client.post("/cron/enrich", headers=AUTH).status_code == 500

    def test_get_not_allowed(self, client):
        assert client.get("/cron/scrape", headers=AUTH).status_code == 405


class TestCronScrape:
    """Tests for POST /cron/scrape."""

    def test_no_sources(self, client):
        response = client.post("/cron/scrape", headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {
            "scraped": 0,
            "inserted": 0,
            "skipped": 0,
            "per_source_errors": {},
            "by_source": {},
        }

    @patch("api.cron_routes.run_scrape")
    def test_returns_scrape_result(self, mock_run_scrape, client, memory_store):
        mock_run_scrape.return_value = ScrapeResult(
            scraped=4, inserted=3, skipped=1, per_source_errors={"reed": "Access denied"}, by_source={"remotive": 3},
        )

        response = client.post("/cron/scrape", headers=AUTH)

        assert response.json()["per_source_errors"] == {"reed": "Access denied"}
        assert mock_run_scrape.call_args.args[0] is memory_store


class TestCronEnrich:
    """Tests for POST /cron/enrich."""

    def test_enriches_pending_batch(self, client, memory_store, make_record):
        for i in range(3):
            memory_store.insert(make_record(EnrichmentStatus.PENDING, job_id=f"j{i}"))

        response = client.post("/cron/enrich", headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {"processed": 3, "enriched": 3, "failed": 0, "stale": 0, "remaining": 0}
        assert memory_store.count_by_status() == {EnrichmentStatus.ENRICHED: 3}

    def test_batch_size_from_settings(self, client, memory_store, make_record, monkeypatch):
        monkeypatch.setattr(settings, "ENRICH_BATCH_SIZE", 2)
        for i in range(5):
            memory_store.insert(make_record(EnrichmentStatus.PENDING, job_id=f"j{i}"))

        data = client.post("/cron/enrich", headers=AUTH).json()

        assert data["processed"] == 2
        assert data["remaining"] == 3
