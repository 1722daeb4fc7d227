"""
Tests for the operator enrichment endpoints.

The queue runs over InMemoryRecordStore through dependency_overrides; the
admin token is patched onto settings.

Run: python3 -m pytest api/__tests__/test_enrichment_routes.py -v
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_queue
from config.settings import settings
from enrichment.queue import EnrichmentQueue
from main import app
from models.job import EnrichmentStatus

TOKEN = "admin-test-token"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


@pytest.fixture
def client(memory_store, clock, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_API_TOKEN", TOKEN)
    app.dependency_overrides[get_queue] = lambda: EnrichmentQueue(memory_store, clock=clock)
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAuth:
    """Tests for the admin bearer guard."""

    def test_missing_header(self, client):
        response = client.get("/admin/jobs/enrich")

        assert response.status_code == 401

    def test_wrong_token(self, client):
        response = client.post("/admin/jobs/enrich", json={"all": True}, headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_token_not_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_API_TOKEN", "")

        response = client.get("/admin/jobs/enrich", headers=AUTH)

        assert response.status_code == 500

    def test_cron_secret_is_not_an_admin_token(self, client, monkeypatch):
        monkeypatch.setattr(settings, "CRON_SECRET", "cron-secret")

        response = client.get("/admin/jobs/enrich", headers={"Authorization": "Bearer cron-secret"})

        assert response.status_code == 401


class TestGetStatus:
    """Tests for GET /admin/jobs/enrich."""

    def test_stats_and_stuck(self, client, memory_store, make_record, clock):
        memory_store.insert(make_record(EnrichmentStatus.PENDING, job_id="p"))
        memory_store.insert(make_record(
            EnrichmentStatus.PROCESSING, job_id="s", attempts=1,
            last_attempt_at=clock.now - timedelta(minutes=20),
        ))

        response = client.get("/admin/jobs/enrich", headers=AUTH)

        assert response.status_code == 200
        data = response.json()
        assert data["stats"]["pending"] == 1
        assert data["stats"]["processing"] == 1
        assert data["stats"]["total_attempts"] == 1
        assert [job["id"] for job in data["stuck"]] == ["s"]


class TestTrigger:
    """Tests for POST /admin/jobs/enrich."""

    def test_enqueue_single(self, client, memory_store, make_record):
        memory_store.insert(make_record(job_id="a"))

        response = client.post("/admin/jobs/enrich", json={"jobId": "a"}, headers=AUTH)

        assert response.status_code == 200
        assert response.json()["status"] == "pending"
        assert memory_store.get("a").status == EnrichmentStatus.PENDING

    def test_enqueue_all(self, client, memory_store, make_record):
        memory_store.insert(make_record(job_id="a"))
        memory_store.insert(make_record(job_id="b"))

        response = client.post("/admin/jobs/enrich", json={"all": True}, headers=AUTH)

        assert response.status_code == 200
        assert response.json()["queued"] == 2

    def test_reset(self, client, memory_store, make_record):
        memory_store.insert(make_record(EnrichmentStatus.FAILED, job_id="a"))

        response = client.post("/admin/jobs/enrich", json={"reset": True}, headers=AUTH)

        assert response.status_code == 200
        assert response.json()["reset"] == 1

    @pytest.mark.parametrize("body", [{}, {"all": True, "reset": True}, {"jobId": 5}, ["all"]])
    def test_invalid_body_is_400(self, client, body):
        response = client.post("/admin/jobs/enrich", json=body, headers=AUTH)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_malformed_json_is_400(self, client):
        response = client.post(
            "/admin/jobs/enrich",
            content=b"{not json",
            headers={**AUTH, "Content-Type": "application/json"},
        )

        assert response.status_code == 400

    def test_unknown_job_is_404(self, client):
        response = client.post("/admin/jobs/enrich", json={"jobId": "missing"}, headers=AUTH)

        assert response.status_code == 404
        assert response.json() == {"error": "Job missing not found", "code": "NOT_FOUND"}

    def test_force_on_live_claim_is_409(self, client, memory_store, make_record, clock):
        memory_store.insert(make_record(
            EnrichmentStatus.PROCESSING, job_id="a", attempts=1, last_attempt_at=clock.now,
        ))

        response = client.post("/admin/jobs/enrich", json={"jobId": "a", "force": True}, headers=AUTH)

        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_STATE"

    def test_force_on_stuck_claim(self, client, memory_store, make_record, clock):
        memory_store.insert(make_record(
            EnrichmentStatus.PROCESSING, job_id="a", attempts=1,
            last_attempt_at=clock.now - timedelta(hours=1),
        ))

        response = client.post("/admin/jobs/enrich", json={"jobId": "a", "force": True}, headers=AUTH)

        assert response.status_code == 200
        assert memory_store.get("a").status == EnrichmentStatus.PENDING
