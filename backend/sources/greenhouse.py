"""
Greenhouse Source Adapter

API: https://boards-api.greenhouse.io/v1/boards/{board}/jobs?content=true
Pattern: One public board per company, no API key, no pagination

Sample API Response:
{
  "jobs": [
    {
      "id": 4012345,
      "title": "Software Engineer, Payments",
      "location": {"name": "San Francisco, CA"},
      "content": "&lt;p&gt;About the role...&lt;/p&gt;",
      "departments": [{"name": "Engineering"}],
      "offices": [{"name": "SF"}],
      "absolute_url": "https://boards.greenhouse.io/stripe/jobs/4012345",
      "updated_at": "2025-01-02T10:00:00-05:00"
    }
  ]
}

Note: `content` is HTML-escaped, so it is unescaped once before stripping tags.
"""

import html
import re
from typing import Any, Dict, List, Optional

import httpx

from .base_source import BaseJobSource
from .enums import Source
from .types import RawPosting
from utils.text import extract_tech_tags, strip_html, unique_tags

DESCRIPTION_MAX_LENGTH = 2000

BOARDS = [
    "stripe", "airbnb", "figma", "notion", "vercel", "linear",
    "anthropic", "openai", "github", "dropbox", "zoom", "twilio",
    "datadog", "elastic", "hashicorp", "mongodb", "confluent",
    "cloudflare", "fastly", "pagerduty", "sendgrid", "segment",
]

# Slugs whose capitalization isn't just the first letter
COMPANY_NAMES = {
    "openai": "OpenAI",
    "github": "GitHub",
    "pagerduty": "PagerDuty",
    "sendgrid": "SendGrid",
    "hashicorp": "HashiCorp",
    "mongodb": "MongoDB",
}

ENGINEERING_TITLE_RE = re.compile(
    r"engineer|developer|software|\bsre\b|devops|full[- ]?stack|front[- ]?end|back[- ]?end"
    r"|platform|infrastructure|data scientist|machine learning|\bml\b|cloud|architect"
    r"|\bcto\b|vp.*eng",
    re.IGNORECASE,
)
ENGINEERING_DEPT_RE = re.compile(
    r"engineer|product|technology|development|data|infrastructure|platform|security",
    re.IGNORECASE,
)

TITLE_KEYWORDS = [
    "React", "Node", "Python", "Java", "TypeScript", "Go", "Rust", "Ruby",
    "AWS", "Kubernetes", "Full Stack", "Frontend", "Backend", "Senior", "Staff",
    "Principal", "Machine Learning", "AI", "iOS", "Android", "Security",
    "Infrastructure", "Platform",
]


def format_company_name(slug: str) -> str:
    return COMPANY_NAMES.get(slug, slug[:1].upper() + slug[1:])


def is_engineering_role(job: Dict[str, Any]) -> bool:
    """Title match, or any department that looks like engineering."""
    if ENGINEERING_TITLE_RE.search(job.get("title") or ""):
        return True
    return any(
        ENGINEERING_DEPT_RE.search(dept.get("name") or "")
        for dept in job.get("departments") or []
    )


class GreenhouseSource(BaseJobSource):
    """Engineering roles from a fixed list of Greenhouse boards."""

    NAME = Source.GREENHOUSE
    API_URL = "https://boards-api.greenhouse.io/v1/boards"

    def __init__(self, config=None, boards: Optional[List[str]] = None):
        super().__init__(config)
        self.boards = boards if boards is not None else list(BOARDS)

    async def _fetch_board(self, client: httpx.AsyncClient, board: str) -> List[Dict[str, Any]]:
        data = await self._get_json(
            client,
            f"{self.API_URL}/{board}/jobs",
            params={"content": "true"},
        )
        return [{**job, "_board": board} for job in data.get("jobs") or []]

    async def _fetch_raw_jobs(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        return await self._fetch_boards(self.boards, lambda board: self._fetch_board(client, board))

    def _normalize(self, raw: Dict[str, Any]) -> Optional[RawPosting]:
        role = (raw.get("title") or "").strip()
        if not role or not is_engineering_role(raw):
            return None

        company = format_company_name(raw["_board"])
        location = (raw.get("location") or {}).get("name")
        if not location:
            offices = raw.get("offices") or []
            location = offices[0].get("name") if offices else None

        departments = [d.get("name") for d in raw.get("departments") or []]
        tags = unique_tags(departments + extract_tech_tags(role, TITLE_KEYWORDS))

        return RawPosting(
            source=self.name,
            company=company,
            role=role,
            location=location or "Remote",
            description=strip_html(html.unescape(raw.get("content") or ""), DESCRIPTION_MAX_LENGTH),
            url=raw.get("absolute_url"),
            source_id=f"greenhouse-{raw['id']}",
            posted_at=raw.get("updated_at"),
            tags=tags,
            extra={"board": raw["_board"]},
        )
