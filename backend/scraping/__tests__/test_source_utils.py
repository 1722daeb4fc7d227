"""
Tests for fetching all sources concurrently over one shared client.

Run: python3 -m pytest scraping/__tests__/test_source_utils.py -v
"""

import asyncio

import httpx

from scraping.source_utils import fetch_all_sources_async, fetch_all_sources_sync
from sources.arbeitnow import ArbeitnowSource
from sources.config import SourceConfig
from sources.remotive import RemotiveSource

FAST = SourceConfig(retry_delay=0, retries=1)


def handler(request):
    if request.url.host == "remotive.com":
        return httpx.Response(200, json={"jobs": [
            {"id": 1, "title": "Backend Engineer", "company_name": "Acme"},
        ]})
    return httpx.Response(500)


class TestFetchAllSources:
    """Tests for fetch_all_sources_async() and fetch_all_sources_sync()."""

    def test_one_failure_does_not_affect_others(self):
        sources = [RemotiveSource(FAST), ArbeitnowSource(FAST)]

        results = fetch_all_sources_sync(sources, transport=httpx.MockTransport(handler))

        assert [r.source for r in results] == ["remotive", "arbeitnow"]
        assert results[0].ok
        assert len(results[0].postings) == 1
        assert not results[1].ok
        assert results[1].error.reason == "Source server error - try again later"

    def test_no_sources(self):
        assert asyncio.run(fetch_all_sources_async([])) == []

    def test_unexpected_exception_becomes_error_result(self):
        class Exploding(RemotiveSource):
            async def fetch_postings(self, client):
                raise RuntimeError("bug")

        results = fetch_all_sources_sync([Exploding(FAST)], transport=httpx.MockTransport(handler))

        assert results[0].error.reason == "Fetch failed: RuntimeError"
