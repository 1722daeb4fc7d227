"""
Typed results for the scraping phase.
"""

from dataclasses import dataclass, field
from typing import Optional

from sources.types import RawPosting
from utils.errors import SourceFetchError


@dataclass
class SourceFetchResult:
    """Postings (or the failure) from one source."""
    source: str
    postings: list[RawPosting] = field(default_factory=list)
    error: Optional[SourceFetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ScrapeResult:
    """
    Outcome of one Scraper.run().

    scraped = postings observed across all sources
    inserted + skipped == scraped
    """
    scraped: int = 0
    inserted: int = 0
    skipped: int = 0
    per_source_errors: dict[str, str] = field(default_factory=dict)
    by_source: dict[str, int] = field(default_factory=dict)  # inserted per source

    def to_dict(self) -> dict:
        return {
            "scraped": self.scraped,
            "inserted": self.inserted,
            "skipped": self.skipped,
            "per_source_errors": dict(self.per_source_errors),
            "by_source": dict(self.by_source),
        }
