"""
Adzuna Source Adapter

API: https://api.adzuna.com/v1/api/jobs/us/search/{page}?app_id=...&app_key=...
Auth: app id + app key as query params (ADZUNA_APP_ID, ADZUNA_API_KEY)
Pattern: One request per page, MAX_PAGES pages fetched in parallel

Sample API Response:
{
  "results": [
    {
      "id": "4567890123",
      "title": "Senior Python Developer",
      "company": {"display_name": "Acme Corp"},
      "location": {"display_name": "Austin, Texas"},
      "salary_min": 120000,
      "salary_max": 150000,
      "description": "We are looking for...",
      "redirect_url": "https://www.adzuna.com/land/ad/4567890123",
      "created": "2025-01-02T10:00:00Z",
      "category": {"tag": "it-jobs", "label": "IT Jobs"}
    }
  ]
}
"""

from typing import Any, Dict, List, Optional

import httpx

from .base_source import BaseJobSource
from .enums import Source
from .types import RawPosting
from utils.text import extract_tech_tags, format_salary, strip_html, unique_tags

DESCRIPTION_MAX_LENGTH = 2000
COUNTRY = "us"
RESULTS_PER_PAGE = 50
MAX_PAGES = 2

TITLE_KEYWORDS = [
    "React", "Node", "Python", "Java", "TypeScript", "JavaScript",
    "AWS", "Azure", "GCP", "Docker", "Kubernetes", "Go", "Rust",
    "C#", ".NET", "PHP", "Ruby", "Swift", "Kotlin", "SQL",
    "DevOps", "Full Stack", "Frontend", "Backend", "Senior", "Junior",
    "Lead", "Staff", "Principal", "Remote",
]


class AdzunaSource(BaseJobSource):
    """US IT jobs from the Adzuna search API (requires app id and key)."""

    NAME = Source.ADZUNA
    API_URL = "https://api.adzuna.com/v1/api/jobs"
    ENV_KEY = "ADZUNA_APP_ID"
    SECRET_ENV_KEY = "ADZUNA_API_KEY"

    async def _fetch_page(self, client: httpx.AsyncClient, page: str) -> List[Dict[str, Any]]:
        data = await self._get_json(
            client,
            f"{self.API_URL}/{COUNTRY}/search/{page}",
            params={
                "app_id": self.config.api_key,
                "app_key": self.config.api_secret,
                "results_per_page": RESULTS_PER_PAGE,
                "category": "it-jobs",
                "sort_by": "date",
            },
        )
        return data.get("results") or []

    async def _fetch_raw_jobs(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        if not self.config.api_key or not self.config.api_secret:
            raise ValueError("ADZUNA_APP_ID and ADZUNA_API_KEY must both be configured")

        pages = [str(page) for page in range(1, MAX_PAGES + 1)]
        return await self._fetch_boards(pages, lambda page: self._fetch_page(client, page))

    def _normalize(self, raw: Dict[str, Any]) -> Optional[RawPosting]:
        role = (raw.get("title") or "").strip()
        if not role:
            return None

        category = (raw.get("category") or {}).get("tag") or "it-jobs"
        return RawPosting(
            source=self.name,
            company=((raw.get("company") or {}).get("display_name") or "").strip() or "Unknown",
            role=role,
            location=(raw.get("location") or {}).get("display_name") or "Unknown",
            description=strip_html(raw.get("description") or "", DESCRIPTION_MAX_LENGTH),
            url=raw.get("redirect_url"),
            source_id=str(raw["id"]),
            posted_at=raw.get("created"),
            salary=format_salary(raw.get("salary_min"), raw.get("salary_max")),
            tags=unique_tags([category, *extract_tech_tags(role, TITLE_KEYWORDS)]),
        )
