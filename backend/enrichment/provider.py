"""
Enrichment providers

A provider turns one claimed JobRecord into a dict of enriched fields, or
raises ProviderError. The queue and worker treat the output as opaque.

BasicEnrichmentProvider derives everything from the scraped payload so the
pipeline runs end to end without an external model.
"""

import re
from typing import Any, Protocol

from models.records import JobRecord
from utils.errors import ProviderError
from utils.text import (
    collapse_whitespace,
    company_slug,
    extract_tech_tags,
    normalize_location,
    truncate,
    unique_tags,
)

SUMMARY_MAX_LENGTH = 280
MAX_TAGS = 8
MAX_REQUIREMENTS = 10

_SENIORITY_LEVELS = [
    ("intern", re.compile(r"\bintern(ship)?\b", re.IGNORECASE)),
    ("junior", re.compile(r"\b(junior|jr\.?|graduate|entry[- ]level)\b", re.IGNORECASE)),
    ("principal", re.compile(r"\b(principal|distinguished)\b", re.IGNORECASE)),
    ("staff", re.compile(r"\bstaff\b", re.IGNORECASE)),
    ("lead", re.compile(r"\b(lead|head of|manager)\b", re.IGNORECASE)),
    ("senior", re.compile(r"\b(senior|sr\.?)\b", re.IGNORECASE)),
]

# Sentences in the description that read like requirements
_REQUIREMENT_RE = re.compile(
    r"\b(\d+\+?\s+years?|experience (with|in)|proficien|familiar(ity)? with|knowledge of|degree in)\b",
    re.IGNORECASE,
)
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")


class EnrichmentProvider(Protocol):
    """Anything with enrich(record) -> dict can be plugged into the worker."""

    def enrich(self, record: JobRecord) -> dict[str, Any]:
        ...


def seniority(role: str) -> str:
    for level, pattern in _SENIORITY_LEVELS:
        if pattern.search(role):
            return level
    return "mid"


def extract_requirements(description: str, limit: int = MAX_REQUIREMENTS) -> list[str]:
    """Description sentences that mention years, experience or skills."""
    sentences = _SENTENCE_SPLIT_RE.split(collapse_whitespace(description))
    return [s for s in sentences if _REQUIREMENT_RE.search(s)][:limit]


def logo_url(company: str) -> str:
    return f"https://logo.clearbit.com/{company_slug(company)}.com"


class BasicEnrichmentProvider:
    """
    Derives structured fields from the raw payload.

    Output:
        {
            "tags": ["Python", "AWS", ...],
            "location": "Remote (US)",
            "remote": true,
            "seniority": "senior",
            "company_logo": "https://logo.clearbit.com/acme.com",
            "requirements": ["5+ years of Python experience.", ...],
            "summary": "We are hiring a..."
        }
    """

    def enrich(self, record: JobRecord) -> dict[str, Any]:
        payload = record.payload
        company = collapse_whitespace(payload.get("company") or "")
        role = collapse_whitespace(payload.get("role") or "")
        if not company or not role:
            raise ProviderError(f"Job {record.id} payload is missing company or role")

        description = payload.get("description") or ""
        location = normalize_location(payload.get("location"))

        requirements = list(payload.get("requirements") or [])[:MAX_REQUIREMENTS]
        if not requirements:
            requirements = extract_requirements(description)

        return {
            "tags": unique_tags(
                list(payload.get("tags") or []) + extract_tech_tags(f"{role} {description}"),
                limit=MAX_TAGS,
            ),
            "location": location,
            "remote": "remote" in location.lower(),
            "seniority": seniority(role),
            "company_logo": payload.get("company_logo") or logo_url(company),
            "requirements": requirements,
            "summary": truncate(collapse_whitespace(description), SUMMARY_MAX_LENGTH),
        }
