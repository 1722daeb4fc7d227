"""
Text helpers shared by all source adapters.

Usage:
    from utils.text import strip_html, truncate, normalize_location

    description = truncate(strip_html(raw_html), 1500)
"""

import html
import re
from typing import Any, Optional

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")
_REMOTE_RE = re.compile(r"^(remote|worldwide|anywhere|work from home|wfh)$", re.IGNORECASE)
_REMOTE_REGION_RE = re.compile(r"^remote\s*[-–—/]\s*(.+)$", re.IGNORECASE)


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text.replace("\x00", "")).strip()


def remove_nul(value: Any) -> Any:
    """
    Drop NUL characters from a string, or from every string nested in
    lists and dicts. PostgreSQL text and JSONB columns reject \\u0000.
    """
    if isinstance(value, str):
        return value.replace("\x00", "")
    if isinstance(value, list):
        return [remove_nul(item) for item in value]
    if isinstance(value, dict):
        return {remove_nul(key): remove_nul(item) for key, item in value.items()}
    return value


def truncate(text: str, max_len: int) -> str:
    """
    Truncate text at a word boundary, appending "..." when shortened.

    Example:
        truncate("alpha beta gamma", 12) -> "alpha beta..."
    """
    if len(text) <= max_len:
        return text
    cut = text[:max_len]
    # Drop the trailing partial word
    cut = re.sub(r"\s+\S*$", "", cut)
    return cut + "..."


def strip_html(raw: str, max_length: Optional[int] = None) -> str:
    """Remove tags, decode entities, drop NULs, collapse whitespace, optionally truncate."""
    text = _TAG_RE.sub(" ", raw or "")
    text = html.unescape(text).replace("\xa0", " ")
    text = collapse_whitespace(text)
    if max_length:
        text = truncate(text, max_length)
    return text


def normalize_location(location: Optional[str]) -> str:
    """
    Normalize location labels.

    "worldwide" / "WFH" / "anywhere" -> "Remote"
    "Remote - US" -> "Remote (US)"
    """
    loc = collapse_whitespace(location or "")
    if not loc:
        return "Remote"
    if _REMOTE_RE.match(loc):
        return "Remote"
    region = _REMOTE_REGION_RE.match(loc)
    if region:
        return f"Remote ({region.group(1).strip()})"
    return loc


def format_salary(
    minimum: Optional[float],
    maximum: Optional[float],
    currency: str = "$",
    period: Optional[str] = None,
) -> Optional[str]:
    """Format a salary range like "$80k - $120k/yr" (None if both ends missing)."""
    if not minimum and not maximum:
        return None

    hourly = (period or "").lower() == "hour"
    suffix = "/hr" if hourly else "/yr"

    def fmt(n: float) -> str:
        if not hourly and n >= 1000:
            return f"{currency}{round(n / 1000)}k"
        return f"{currency}{int(n) if float(n).is_integer() else n}"

    if minimum and maximum:
        return f"{fmt(minimum)} - {fmt(maximum)}{suffix}"
    if minimum:
        return f"{fmt(minimum)}+{suffix}"
    return f"Up to {fmt(maximum)}{suffix}"


def company_slug(company: str) -> str:
    """Lowercase alphanumeric slug ("Hugging Face" -> "huggingface")."""
    return re.sub(r"[^a-z0-9]", "", company.lower())


TECH_KEYWORDS = [
    "JavaScript", "TypeScript", "Python", "Java", "C#", "C++", "Go", "Rust",
    "Ruby", "PHP", "Swift", "Kotlin", "Scala", "React", "Angular", "Vue",
    "Next.js", "Node.js", "Django", "Flask", "Spring", "Rails", "Laravel",
    "AWS", "Azure", "GCP", "Docker", "Kubernetes", "Terraform", "CI/CD",
    "GraphQL", "REST", "SQL", "PostgreSQL", "MySQL", "MongoDB", "Redis",
    "Elasticsearch", "Kafka", "RabbitMQ", "TensorFlow", "PyTorch",
    "Machine Learning", "AI", "DevOps", "Figma", "Tailwind", "CSS", "HTML",
    "Git", "Linux", "Agile", "Scrum",
]


def extract_tech_tags(text: str, keywords: Optional[list[str]] = None) -> list[str]:
    """
    Return the keywords found in text as whole words (case-insensitive).

    Example:
        extract_tech_tags("Go and PostgreSQL on AWS") -> ["Go", "AWS", "PostgreSQL"]
    """
    lower = (text or "").lower()
    found = []
    for keyword in keywords or TECH_KEYWORDS:
        pattern = rf"(?<!\w){re.escape(keyword.lower())}(?!\w)"
        if re.search(pattern, lower):
            found.append(keyword)
    return found


def unique_tags(tags: list[str], limit: int = 6) -> list[str]:
    """Drop empty and case-insensitive duplicate tags, keep order, cap at `limit`."""
    seen: set[str] = set()
    result = []
    for tag in tags:
        tag = (tag or "").strip()
        if not tag or tag.lower() in seen:
            continue
        seen.add(tag.lower())
        result.append(tag)
    return result[:limit]
