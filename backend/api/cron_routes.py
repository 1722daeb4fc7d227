"""
Scheduler-facing API routes.

Endpoints:
- POST /cron/scrape    Fetch all enabled sources and insert new postings
- POST /cron/enrich    Claim and enrich one batch of pending records

Both require Authorization: Bearer <CRON_SECRET> (500 if the secret is not
configured, 401 if it doesn't match). The handlers are sync so the scrape's
asyncio.run() executes in FastAPI's threadpool, outside the server loop.
"""

from fastapi import APIRouter, Depends

from api.dependencies import (
    get_provider,
    get_queue,
    get_record_store,
    get_sources,
    require_cron_secret,
)
from config.settings import settings
from db.sql_store import SqlRecordStore
from enrichment.provider import EnrichmentProvider
from enrichment.queue import EnrichmentQueue
from sources.base_source import BaseJobSource
from workers.enrichment_worker import run_enrichment_batch
from workers.scrape_worker import run_scrape

router = APIRouter(dependencies=[Depends(require_cron_secret)])


@router.post("/scrape")
def cron_scrape(
    store: SqlRecordStore = Depends(get_record_store),
    sources: list[BaseJobSource] = Depends(get_sources),
):
    """
    Returns:
        {"scraped", "inserted", "skipped", "per_source_errors", "by_source"}
    """
    return run_scrape(store, sources).to_dict()


@router.post("/enrich")
def cron_enrich(
    queue: EnrichmentQueue = Depends(get_queue),
    provider: EnrichmentProvider = Depends(get_provider),
):
    """
    Returns:
        {"processed", "enriched", "failed", "stale", "remaining"}
    """
    return run_enrichment_batch(queue, provider, settings.ENRICH_BATCH_SIZE).to_dict()
