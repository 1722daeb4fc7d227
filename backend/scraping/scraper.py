"""
Scraper: source postings -> unenriched JobRecords

Flow for one run:
1. Fetch all sources concurrently (one failure never aborts the others)
2. Fingerprint every posting; one batched lookup finds fingerprints already stored
3. Insert the rest as `unenriched`, attempts=0

A posting is `skipped` when its fingerprint is already stored, was seen earlier
in the same run, or lost an insert race to an overlapping scrape. Existing
records are never touched.
"""

import uuid
from datetime import datetime
from typing import Callable, Optional, Sequence

from db.record_store import RecordStore
from models.job import EnrichmentStatus
from models.records import Enrichment, JobRecord
from scraping.source_utils import fetch_all_sources_sync
from scraping.types import ScrapeResult, SourceFetchResult
from sources.base_source import BaseJobSource
from sources.types import RawPosting
from utils.clock import utc_now
from utils.text import remove_nul
from utils.worker_logging import ScrapeLogContext


def build_record(posting: RawPosting, created_at: Optional[datetime] = None) -> JobRecord:
    """New unenriched JobRecord for a posting."""
    return JobRecord(
        id=uuid.uuid4().hex,
        fingerprint=posting.fingerprint,
        source_name=posting.source,
        source_id=remove_nul(posting.source_id),
        payload=posting.to_payload(),
        enrichment=Enrichment(status=EnrichmentStatus.UNENRICHED, attempts=0),
        created_at=created_at,
    )


class Scraper:
    """
    Pulls postings from sources into the record store.

    Example:
        scraper = Scraper(SqlRecordStore(db), get_enabled_sources(settings))
        result = scraper.run()
    """

    def __init__(
        self,
        store: RecordStore,
        sources: Sequence[BaseJobSource],
        clock: Callable[[], datetime] = utc_now,
        log: Optional[ScrapeLogContext] = None,
        _fetch_sources: Callable[[Sequence[BaseJobSource]], list[SourceFetchResult]] = fetch_all_sources_sync,
    ):
        self.store = store
        self.sources = list(sources)
        self.clock = clock
        self.log = log or ScrapeLogContext(clock().strftime("%Y%m%dT%H%M%S"))
        self._fetch_sources = _fetch_sources

    def run(self) -> ScrapeResult:
        self.log.log_info(f"Fetching {len(self.sources)} sources")
        fetched = self._fetch_sources(self.sources)
        return self.ingest(fetched)

    def ingest(self, fetched: Sequence[SourceFetchResult]) -> ScrapeResult:
        """Dedup and insert already-fetched postings."""
        result = ScrapeResult()

        for source_result in fetched:
            if not source_result.ok:
                self.log.for_source(source_result.source).log_warning(
                    f"Source failed: {source_result.error.reason}"
                )
                result.per_source_errors[source_result.source] = source_result.error.reason

        postings = [p for source_result in fetched if source_result.ok for p in source_result.postings]
        result.scraped = len(postings)

        stored = self.store.existing_fingerprints(p.fingerprint for p in postings)
        seen: set[str] = set()
        now = self.clock()

        for posting in postings:
            fingerprint = posting.fingerprint
            if fingerprint in stored or fingerprint in seen:
                result.skipped += 1
                continue
            seen.add(fingerprint)

            if self.store.insert(build_record(posting, created_at=now)):
                result.inserted += 1
                result.by_source[posting.source] = result.by_source.get(posting.source, 0) + 1
            else:
                result.skipped += 1

        self.log.log_info(
            f"Scraped {result.scraped}, inserted {result.inserted}, skipped {result.skipped}, "
            f"{len(result.per_source_errors)} source errors"
        )
        return result
