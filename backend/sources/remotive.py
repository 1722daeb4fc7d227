"""
Remotive Source Adapter

API: https://remotive.com/api/remote-jobs?category=software-dev&limit=100
Pattern: Single JSON document, no pagination, no API key

Sample API Response:
{
  "jobs": [
    {
      "id": 1912345,
      "url": "https://remotive.com/remote-jobs/software-dev/backend-engineer-1912345",
      "title": "Backend Engineer",
      "company_name": "Acme",
      "company_logo": "https://remotive.com/job/1912345/logo",
      "tags": ["python", "django"],
      "salary": "$100k - $130k",
      "publication_date": "2025-01-02T10:00:00",
      "candidate_required_location": "Worldwide",
      "description": "<p>We are hiring...</p>"
    }
  ]
}
"""

from typing import Any, Dict, List, Optional

import httpx

from .base_source import BaseJobSource
from .enums import Source
from .types import RawPosting
from utils.text import normalize_location, strip_html, unique_tags

DESCRIPTION_MAX_LENGTH = 2000


class RemotiveSource(BaseJobSource):
    """Remote software-dev jobs from Remotive."""

    NAME = Source.REMOTIVE
    API_URL = "https://remotive.com/api/remote-jobs"

    async def _fetch_raw_jobs(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        data = await self._get_json(
            client,
            self.API_URL,
            params={"category": "software-dev", "limit": 100},
        )
        return data.get("jobs") or []

    def _normalize(self, raw: Dict[str, Any]) -> Optional[RawPosting]:
        company = (raw.get("company_name") or "").strip()
        role = (raw.get("title") or "").strip()
        if not company or not role:
            return None

        extra = {}
        if raw.get("company_logo"):
            extra["company_logo"] = raw["company_logo"]

        return RawPosting(
            source=self.name,
            company=company,
            role=role,
            location=normalize_location(raw.get("candidate_required_location")),
            description=strip_html(raw.get("description") or "", DESCRIPTION_MAX_LENGTH),
            url=raw.get("url"),
            source_id=str(raw["id"]),
            posted_at=raw.get("publication_date"),
            salary=raw.get("salary") or None,
            tags=unique_tags(raw.get("tags") or []),
            extra=extra,
        )
