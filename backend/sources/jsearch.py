"""
JSearch Source Adapter (RapidAPI)

API: https://jsearch.p.rapidapi.com/search?query=...&page=1&num_pages=1&date_posted=month
Auth: X-RapidAPI-Key / X-RapidAPI-Host headers (RAPIDAPI_KEY)
Pattern: One search per query; results overlap, so they are deduplicated by job_id

Aggregates Google Jobs, Indeed, LinkedIn and Glassdoor listings.

Sample API Response:
{
  "status": "OK",
  "data": [
    {
      "job_id": "aBcD123==",
      "job_title": "Backend Engineer",
      "employer_name": "Acme",
      "employer_logo": "https://logo.example.com/acme.png",
      "job_description": "...",
      "job_required_skills": ["Python", "PostgreSQL"],
      "job_min_salary": 130000,
      "job_max_salary": 160000,
      "job_salary_period": "YEAR",
      "job_city": "Denver",
      "job_state": "CO",
      "job_is_remote": false,
      "job_apply_link": "https://example.com/apply",
      "job_posted_at_datetime_utc": "2025-01-02T10:00:00.000Z",
      "job_highlights": {"Qualifications": ["..."], "Benefits": ["..."]}
    }
  ]
}
"""

from typing import Any, Dict, List, Optional

import httpx

from .base_source import BaseJobSource
from .enums import Source
from .types import RawPosting
from utils.text import format_salary, strip_html, unique_tags

DESCRIPTION_MAX_LENGTH = 2000
API_HOST = "jsearch.p.rapidapi.com"
QUERIES = [
    "software engineer",
    "frontend engineer",
    "backend engineer",
    "full stack engineer",
]


def build_location(raw: Dict[str, Any]) -> str:
    if raw.get("job_is_remote"):
        return "Remote"
    parts = [part for part in (raw.get("job_city"), raw.get("job_state")) if part]
    return ", ".join(parts) if parts else "Unknown"


class JSearchSource(BaseJobSource):
    """Aggregated job-board listings from JSearch (requires RAPIDAPI_KEY)."""

    NAME = Source.JSEARCH
    API_URL = f"https://{API_HOST}/search"
    ENV_KEY = "RAPIDAPI_KEY"

    async def _search(self, client: httpx.AsyncClient, query: str) -> List[Dict[str, Any]]:
        data = await self._get_json(
            client,
            self.API_URL,
            params={"query": query, "page": 1, "num_pages": 1, "date_posted": "month"},
            headers={"X-RapidAPI-Key": self.config.api_key or "", "X-RapidAPI-Host": API_HOST},
        )
        return data.get("data") or []

    async def _fetch_raw_jobs(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        if not self.config.api_key:
            raise ValueError("RAPIDAPI_KEY is not configured")

        results = await self._fetch_boards(QUERIES, lambda query: self._search(client, query))

        seen = set()
        jobs = []
        for job in results:
            if job.get("job_id") in seen:
                continue
            seen.add(job.get("job_id"))
            jobs.append(job)
        return jobs

    def _normalize(self, raw: Dict[str, Any]) -> Optional[RawPosting]:
        company = (raw.get("employer_name") or "").strip()
        role = (raw.get("job_title") or "").strip()
        if not company or not role:
            return None

        highlights = raw.get("job_highlights") or {}
        extra: Dict[str, Any] = {}
        if raw.get("employer_logo"):
            extra["company_logo"] = raw["employer_logo"]
        if highlights.get("Qualifications"):
            extra["requirements"] = list(highlights["Qualifications"])
        if highlights.get("Benefits"):
            extra["benefits"] = list(highlights["Benefits"])

        period = "hour" if (raw.get("job_salary_period") or "").upper() == "HOUR" else None
        return RawPosting(
            source=self.name,
            company=company,
            role=role,
            location=build_location(raw),
            description=strip_html(raw.get("job_description") or "", DESCRIPTION_MAX_LENGTH),
            url=raw.get("job_apply_link"),
            source_id=raw["job_id"],
            posted_at=raw.get("job_posted_at_datetime_utc"),
            salary=format_salary(raw.get("job_min_salary"), raw.get("job_max_salary"), period=period),
            tags=unique_tags(raw.get("job_required_skills") or []),
            extra=extra,
        )
