"""
The Muse Source Adapter

API: https://www.themuse.com/api/public/jobs?category=Engineering&page=0
Pattern: Paged JSON (page_count tells when to stop), API key optional (MUSE_API_KEY)

Sample API Response:
{
  "page": 0,
  "page_count": 20,
  "results": [
    {
      "id": 11223344,
      "name": "Senior Software Engineer",
      "publication_date": "2025-01-02T10:00:00Z",
      "contents": "<p>...</p>",
      "company": {
        "name": "Acme",
        "logo": "https://assets.themuse.com/acme.png",
        "industries": [{"name": "Software"}],
        "size": "201-500",
        "perks": [{"name": "Remote friendly"}]
      },
      "locations": [{"name": "Flexible / Remote"}],
      "levels": [{"name": "Senior Level", "short_name": "senior"}],
      "refs": {"landing_page": "https://www.themuse.com/jobs/acme/senior-software-engineer"}
    }
  ]
}
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .base_source import BaseJobSource
from .enums import Source
from .types import RawPosting
from utils.text import strip_html, unique_tags

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_LENGTH = 2000
PAGES_TO_FETCH = 5

COMPANY_SIZES = {
    "1-10": "Small startup",
    "11-50": "Small startup",
    "51-200": "Growing company",
    "201-500": "Mid-size",
    "501-1000": "Mid-size",
    "1001-5000": "Large",
    "5001-10000": "Enterprise",
    "10001+": "Enterprise",
}


def company_size_label(size: Optional[str]) -> Optional[str]:
    if not size:
        return None
    return COMPANY_SIZES.get(size, size)


class TheMuseSource(BaseJobSource):
    """Engineering jobs from The Muse, first PAGES_TO_FETCH pages."""

    NAME = Source.THEMUSE
    API_URL = "https://www.themuse.com/api/public/jobs"
    ENV_KEY = "MUSE_API_KEY"
    ENV_KEY_OPTIONAL = True

    async def _fetch_raw_jobs(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        jobs: List[Dict[str, Any]] = []
        for page in range(PAGES_TO_FETCH):
            params: Dict[str, Any] = {"category": "Engineering", "page": page}
            if self.config.api_key:
                params["api_key"] = self.config.api_key

            try:
                data = await self._get_json(client, self.API_URL, params=params)
            except httpx.HTTPError as e:
                if not jobs:
                    raise
                # Keep the pages already fetched
                logger.warning(f"[{self.name}] page {page} failed, stopping: {e!r}")
                break

            jobs.extend(data.get("results") or [])
            if page >= int(data.get("page_count") or 0) - 1:
                break
        return jobs

    def _normalize(self, raw: Dict[str, Any]) -> Optional[RawPosting]:
        company_info = raw.get("company") or {}
        company = (company_info.get("name") or "").strip()
        role = (raw.get("name") or "").strip()
        if not company or not role:
            return None

        locations = raw.get("locations") or []
        location_name = locations[0].get("name") if locations else None
        if not location_name or "flexible" in location_name.lower():
            location = "Remote"
        else:
            location = location_name

        industries = company_info.get("industries") or []
        levels = raw.get("levels") or []
        perks = [perk.get("name") for perk in company_info.get("perks") or [] if perk.get("name")]
        tags = unique_tags([
            industries[0].get("name") if industries else None,
            levels[0].get("short_name") if levels else None,
            company_size_label(company_info.get("size")),
            *perks,
        ])

        extra: Dict[str, Any] = {}
        if company_info.get("logo"):
            extra["company_logo"] = company_info["logo"]
        if perks:
            extra["benefits"] = perks

        return RawPosting(
            source=self.name,
            company=company,
            role=role,
            location=location,
            description=strip_html(raw.get("contents") or "", DESCRIPTION_MAX_LENGTH),
            url=(raw.get("refs") or {}).get("landing_page"),
            source_id=str(raw["id"]),
            posted_at=raw.get("publication_date"),
            tags=tags,
            extra=extra,
        )
