"""
Scrape Worker Lambda Handler

Invoked on a schedule (EventBridge) or through POST /cron/scrape.

Event format:
{
    "sources": ["remotive", "lever"],  // Optional: subset of enabled sources
    "use_test_db": false                // Optional: when true, uses TEST_DATABASE_URL
}

Workflow:
1. Build the enabled source adapters from settings (keyed sources without a key are skipped)
2. Fetch all sources concurrently
3. Dedup by fingerprint and insert new records as unenriched

Log Format:
All logs use prefix [ScrapeWorker:run=LABEL] / [ScrapeWorker:run=LABEL:source=NAME].
"""

import logging
from typing import Callable, Optional, Sequence

from config.settings import settings
from db.record_store import RecordStore
from db.session import SessionLocal, get_test_session_local
from db.sql_store import SqlRecordStore
from scraping.scraper import Scraper
from scraping.types import ScrapeResult
from sources.base_source import BaseJobSource
from sources.registry import get_enabled_sources
from utils.clock import utc_now
from utils.worker_logging import ScrapeLogContext

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def select_sources(
    only: Optional[Sequence[str]] = None,
    _get_enabled_sources: Callable = get_enabled_sources,
) -> list[BaseJobSource]:
    """Enabled adapters, optionally narrowed to the names in `only`."""
    sources = _get_enabled_sources(settings)
    if only:
        wanted = {name.strip().lower() for name in only}
        sources = [source for source in sources if source.name in wanted]
    return sources


def run_scrape(
    store: RecordStore,
    sources: Sequence[BaseJobSource],
    log: Optional[ScrapeLogContext] = None,
    _scraper_cls=Scraper,
) -> ScrapeResult:
    """
    Run one scrape.

    Args:
        store: Record store
        sources: Adapters to fetch
        log: Log context (run label from the current time when omitted)
        _scraper_cls: Scraper class (for testing)
    """
    log = log or ScrapeLogContext(utc_now().strftime("%Y%m%dT%H%M%S"))
    if not sources:
        log.log_warning("No sources enabled, nothing to scrape")
        return ScrapeResult()

    log.log_info(f"Sources: {', '.join(source.name for source in sources)}")
    return _scraper_cls(store, sources, log=log).run()


# =============================================================================
# Lambda Handler
# =============================================================================

def handler(event: dict, context) -> dict:
    """
    Lambda handler for the scheduled scrape worker.

    Args:
        event: {
            sources: list[str]  // Optional
            use_test_db: bool  // Optional: when true, uses TEST_DATABASE_URL
        }
        context: Lambda context (unused)

    Returns:
        ScrapeResult as a dict
    """
    event = event or {}
    use_test_db = bool(event.get("use_test_db", False))
    log = ScrapeLogContext(utc_now().strftime("%Y%m%dT%H%M%S"), use_test_db=use_test_db)

    if use_test_db:
        log.log_info("Using TEST database")
        db = get_test_session_local()()
    else:
        db = SessionLocal()

    try:
        sources = select_sources(event.get("sources"))
        result = run_scrape(SqlRecordStore(db), sources, log=log)
        return result.to_dict()
    except Exception as e:
        log.log_error(f"Worker error: {e}")
        raise
    finally:
        db.close()
