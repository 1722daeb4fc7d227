"""
RemoteOK Source Adapter

API: https://remoteok.com/api
Pattern: JSON array; the first element is a legal notice, not a job

Sample API Response:
[
  {"legal": "API Terms of Service: ..."},
  {
    "id": "1093521",
    "company": "Acme",
    "position": "Senior Go Engineer",
    "tags": ["golang", "backend"],
    "description": "<p>...</p>",
    "location": "Worldwide",
    "salary_min": 90000,
    "salary_max": 140000,
    "date": "2025-01-02T10:00:00+00:00",
    "url": "https://remoteok.com/remote-jobs/1093521"
  }
]
"""

from typing import Any, Dict, List, Optional

import httpx

from .base_source import BaseJobSource
from .enums import Source
from .types import RawPosting
from utils.text import format_salary, normalize_location, strip_html, unique_tags

DESCRIPTION_MAX_LENGTH = 1500


class RemoteOKSource(BaseJobSource):
    """Remote jobs from RemoteOK."""

    NAME = Source.REMOTEOK
    API_URL = "https://remoteok.com/api"

    async def _fetch_raw_jobs(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        data = await self._get_json(client, self.API_URL)
        if not isinstance(data, list):
            raise ValueError("RemoteOK response is not a list")
        # Skip the legal notice
        return [item for item in data[1:] if isinstance(item, dict)]

    def _normalize(self, raw: Dict[str, Any]) -> Optional[RawPosting]:
        company = (raw.get("company") or "").strip()
        role = (raw.get("position") or "").strip()
        if not company or not role:
            return None

        extra = {}
        if raw.get("company_logo"):
            extra["company_logo"] = raw["company_logo"]

        return RawPosting(
            source=self.name,
            company=company,
            role=role,
            location=normalize_location(raw.get("location")),
            description=strip_html(raw.get("description") or "", DESCRIPTION_MAX_LENGTH),
            url=raw.get("url"),
            source_id=str(raw["id"]),
            posted_at=raw.get("date"),
            salary=format_salary(raw.get("salary_min"), raw.get("salary_max")),
            tags=unique_tags(raw.get("tags") or []),
            extra=extra,
        )
