"""
Fetch configuration for source adapters

Every adapter receives a SourceConfig. Source-specific knobs (board lists,
search keywords, page sizes) are hardcoded in the adapter implementation.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class SourceConfig:
    """
    Fetch configuration shared by all adapters.

    Examples:
        # Defaults (50 postings, 3 attempts)
        config = SourceConfig()

        # Tests: no retry delay
        config = SourceConfig(retry_delay=0)

        # From application settings
        config = SourceConfig.from_settings(settings, api_key=settings.REED_API_KEY)
    """
    max_postings: int = 50
    timeout: float = 15.0
    retries: int = 3
    retry_delay: float = 1.0  # seconds, doubled after each failed attempt
    user_agent: str = "JobEnrichmentPipeline/1.0 (job-aggregator)"
    api_key: Optional[str] = None
    api_secret: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        settings,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
    ) -> "SourceConfig":
        """Build from the application Settings object."""
        return cls(
            max_postings=settings.MAX_POSTINGS_PER_SOURCE,
            timeout=settings.SOURCE_TIMEOUT_SECONDS,
            retries=max(1, settings.SOURCE_FETCH_RETRIES),
            retry_delay=settings.SOURCE_RETRY_DELAY_SECONDS,
            user_agent=settings.USER_AGENT,
            api_key=api_key or None,
            api_secret=api_secret or None,
        )
