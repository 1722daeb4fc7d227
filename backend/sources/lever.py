"""
Lever Source Adapter

API: https://api.lever.co/v0/postings/{board}?mode=json&limit=50
Pattern: One public board per company, JSON array, no API key

Sample API Response:
[
  {
    "id": "5f1c9a2e-...",
    "text": "Senior Backend Engineer",
    "categories": {"location": "Remote - US", "team": "Platform", "department": "Engineering"},
    "description": "<div>...</div>",
    "descriptionPlain": "...",
    "lists": [{"text": "Requirements", "content": "<li>5+ years Go</li><li>AWS</li>"}],
    "hostedUrl": "https://jobs.lever.co/acme/5f1c9a2e",
    "createdAt": 1735812000000
  }
]
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .base_source import BaseJobSource
from .enums import Source
from .types import RawPosting
from utils.text import extract_tech_tags, normalize_location, strip_html, truncate, unique_tags

DESCRIPTION_MAX_LENGTH = 2000
MAX_REQUIREMENTS = 10

BOARDS = [
    "netflix", "spotify", "square", "coinbase", "robinhood",
    "brex", "plaid", "lattice", "gusto", "rippling", "deel",
    "remote", "mercury", "ramp", "scale", "weights-biases",
    "huggingface", "mistral", "cohere", "stability",
]

ENGINEERING_RE = re.compile(
    r"engineer|developer|software|\bsre\b|devops|infrastructure|platform|backend|frontend"
    r"|full[- ]?stack|data|machine learning|\bml\b|\bai\b|security",
    re.IGNORECASE,
)

TITLE_KEYWORDS = [
    "Senior", "Staff", "Principal", "Lead", "Junior", "Intern",
    "Frontend", "Backend", "Fullstack", "Full-Stack", "DevOps", "SRE",
    "Mobile", "iOS", "Android", "Data", "ML", "AI", "Security", "Platform",
    "Infrastructure", "Cloud",
]

_LIST_ITEM_RE = re.compile(r"<li[^>]*>(.*?)</li>", re.IGNORECASE | re.DOTALL)


def format_company_name(slug: str) -> str:
    """weights-biases -> Weights Biases"""
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def is_engineering_role(posting: Dict[str, Any]) -> bool:
    categories = posting.get("categories") or {}
    fields = [categories.get("team"), categories.get("department"), posting.get("text")]
    return any(ENGINEERING_RE.search(field or "") for field in fields)


def parse_requirements(lists: Optional[List[Dict[str, Any]]]) -> List[str]:
    """Pull <li> items out of the first Requirements/Qualifications list."""
    for section in lists or []:
        heading = (section.get("text") or "").lower()
        if "requirement" in heading or "qualification" in heading:
            items = [strip_html(li) for li in _LIST_ITEM_RE.findall(section.get("content") or "")]
            return [item for item in items if item][:MAX_REQUIREMENTS]
    return []


class LeverSource(BaseJobSource):
    """Engineering roles from a fixed list of Lever boards."""

    NAME = Source.LEVER
    API_URL = "https://api.lever.co/v0/postings"

    def __init__(self, config=None, boards: Optional[List[str]] = None):
        super().__init__(config)
        self.boards = boards if boards is not None else list(BOARDS)

    async def _fetch_board(self, client: httpx.AsyncClient, board: str) -> List[Dict[str, Any]]:
        data = await self._get_json(
            client,
            f"{self.API_URL}/{board}",
            params={"mode": "json", "limit": 50},
        )
        if not isinstance(data, list):
            raise ValueError(f"Lever board {board} response is not a list")
        return [{**posting, "_board": board} for posting in data]

    async def _fetch_raw_jobs(self, client: httpx.AsyncClient) -> List[Dict[str, Any]]:
        return await self._fetch_boards(self.boards, lambda board: self._fetch_board(client, board))

    def _normalize(self, raw: Dict[str, Any]) -> Optional[RawPosting]:
        role = (raw.get("text") or "").strip()
        if not role or not is_engineering_role(raw):
            return None

        categories = raw.get("categories") or {}
        if raw.get("description"):
            description = strip_html(raw["description"], DESCRIPTION_MAX_LENGTH)
        else:
            description = truncate(raw.get("descriptionPlain") or "", DESCRIPTION_MAX_LENGTH)

        tags = unique_tags([
            categories.get("team"),
            categories.get("department"),
            *extract_tech_tags(role, TITLE_KEYWORDS),
        ])

        posted_at = None
        if raw.get("createdAt"):
            posted_at = datetime.fromtimestamp(raw["createdAt"] / 1000, tz=timezone.utc).isoformat()

        extra: Dict[str, Any] = {"board": raw["_board"]}
        requirements = parse_requirements(raw.get("lists"))
        if requirements:
            extra["requirements"] = requirements

        return RawPosting(
            source=self.name,
            company=format_company_name(raw["_board"]),
            role=role,
            location=normalize_location(categories.get("location")),
            description=description,
            url=raw.get("hostedUrl"),
            source_id=raw.get("id"),
            posted_at=posted_at,
            tags=tags,
            extra=extra,
        )
