"""
Utility functions for running source adapters.

Provides both async and sync interfaces. All sources share one
httpx.AsyncClient and run concurrently; a failing source never affects
the others.
"""

import asyncio
import logging
from typing import Optional, Sequence

import httpx

from scraping.types import SourceFetchResult
from sources.base_source import BaseJobSource, map_fetch_error
from utils.errors import SourceFetchError

logger = logging.getLogger(__name__)


async def fetch_source_async(source: BaseJobSource, client: httpx.AsyncClient) -> SourceFetchResult:
    """Fetch one source, turning any failure into a SourceFetchError result."""
    try:
        postings = await source.fetch_postings(client)
        return SourceFetchResult(source=source.name, postings=postings)
    except SourceFetchError as e:
        return SourceFetchResult(source=source.name, error=e)
    except Exception as e:
        logger.exception(f"Unexpected error fetching {source.name}: {e}")
        return SourceFetchResult(
            source=source.name,
            error=SourceFetchError(source.name, map_fetch_error(e)),
        )


async def fetch_all_sources_async(
    sources: Sequence[BaseJobSource],
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[SourceFetchResult]:
    """
    Fetch every source in parallel over one shared client.

    Args:
        sources: Adapters to run
        transport: Optional transport override (httpx.MockTransport in tests)

    Returns:
        One SourceFetchResult per source, in input order
    """
    if not sources:
        return []

    async with httpx.AsyncClient(transport=transport, follow_redirects=True) as client:
        return list(await asyncio.gather(
            *(fetch_source_async(source, client) for source in sources)
        ))


def fetch_all_sources_sync(
    sources: Sequence[BaseJobSource],
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[SourceFetchResult]:
    """
    Fetch every source in parallel (sync wrapper).

    This is for use in Lambda workers where we don't have an async context.
    """
    return asyncio.run(fetch_all_sources_async(sources, transport=transport))
