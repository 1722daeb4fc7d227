"""
Arbeitnow Source Adapter

API: https://www.arbeitnow.com/api/job-board-api
Pattern: Single JSON page under "data", created_at as a unix timestamp

Sample API Response:
{
  "data": [
    {
      "slug": "backend-developer-berlin-123",
      "company_name": "Acme GmbH",
      "title": "Backend Developer",
      "description": "<p>...</p>",
      "tags": ["php", "laravel"],
      "location": "Berlin",
      "remote": true,
      "url": "https://www.arbeitnow.com/jobs/backend-developer-berlin-123",
      "created_at": 1735812000
    }
  ]
}
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .base_source import BaseJobSource
from .enums import Source
from .types import RawPosting
from utils.text import collapse_whitespace, strip_html, unique_tags

DESCRIPTION_MAX_LENGTH = 1500


class ArbeitnowSource(BaseJobSource):
    """European job board, mostly Germany."""

    NAME = Source.ARBEITNOW
    API_URL = "https://www.arbeitnow.com/api/job-board-api"

    async def _fetch_raw_jobs(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        data = await self._get_json(client, self.API_URL)
        return data.get("data") or []

    def _normalize(self, raw: Dict[str, Any]) -> Optional[RawPosting]:
        company = (raw.get("company_name") or "").strip()
        role = (raw.get("title") or "").strip()
        if not company or not role:
            return None

        location = collapse_whitespace(raw.get("location") or "")
        if raw.get("remote"):
            location = f"{location or 'Remote'} (Remote)"
        else:
            location = location or "Unknown"

        posted_at = None
        if raw.get("created_at"):
            posted_at = datetime.fromtimestamp(int(raw["created_at"]), tz=timezone.utc).isoformat()

        return RawPosting(
            source=self.name,
            company=company,
            role=role,
            location=location,
            description=strip_html(raw.get("description") or "", DESCRIPTION_MAX_LENGTH),
            url=raw.get("url"),
            source_id=raw.get("slug"),
            posted_at=posted_at,
            tags=unique_tags(raw.get("tags") or []),
        )
