"""
Reed Source Adapter

API: https://www.reed.co.uk/api/1.0/search?keywords=...&resultsToTake=50
Auth: HTTP Basic, API key as username and empty password (REED_API_KEY)
Pattern: One search per keyword; results overlap, so they are deduplicated by jobId

Sample API Response:
{
  "results": [
    {
      "jobId": 52345678,
      "jobTitle": "Python Developer",
      "employerName": "Acme Ltd",
      "locationName": "London",
      "minimumSalary": 50000.0,
      "maximumSalary": 65000.0,
      "jobUrl": "https://www.reed.co.uk/jobs/python-developer/52345678",
      "jobDescription": "We are looking for...",
      "date": "02/01/2025"
    }
  ],
  "totalResults": 1234
}
"""

from typing import Any, Dict, List, Optional

import httpx

from .base_source import BaseJobSource
from .enums import Source
from .types import RawPosting
from utils.text import extract_tech_tags, format_salary, strip_html, unique_tags

DESCRIPTION_MAX_LENGTH = 2000
RESULTS_PER_QUERY = 50
SEARCH_KEYWORDS = ["software developer", "software engineer"]


class ReedSource(BaseJobSource):
    """UK jobs from the Reed search API (requires REED_API_KEY)."""

    NAME = Source.REED
    API_URL = "https://www.reed.co.uk/api/1.0/search"
    ENV_KEY = "REED_API_KEY"

    async def _search(self, client: httpx.AsyncClient, keywords: str) -> List[Dict[str, Any]]:
        data = await self._get_json(
            client,
            self.API_URL,
            params={"keywords": keywords, "resultsToTake": RESULTS_PER_QUERY},
            auth=httpx.BasicAuth(self.config.api_key or "", ""),
        )
        return data.get("results") or []

    async def _fetch_raw_jobs(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        if not self.config.api_key:
            raise ValueError("REED_API_KEY is not configured")

        results = await self._fetch_boards(SEARCH_KEYWORDS, lambda kw: self._search(client, kw))

        seen = set()
        jobs = []
        for job in results:
            job_id = str(job.get("jobId"))
            if job_id in seen:
                continue
            seen.add(job_id)
            jobs.append(job)
        return jobs

    def _normalize(self, raw: Dict[str, Any]) -> Optional[RawPosting]:
        role = (raw.get("jobTitle") or "").strip()
        if not role:
            return None

        raw_description = raw.get("jobDescription") or ""
        return RawPosting(
            source=self.name,
            company=(raw.get("employerName") or "").strip() or "Unknown",
            role=role,
            location=raw.get("locationName") or "United Kingdom",
            description=strip_html(raw_description, DESCRIPTION_MAX_LENGTH),
            url=raw.get("jobUrl"),
            source_id=str(raw["jobId"]),
            posted_at=raw.get("date"),
            salary=format_salary(raw.get("minimumSalary"), raw.get("maximumSalary"), currency="£"),
            tags=unique_tags(extract_tech_tags(f"{role} {raw_description}")),
        )
