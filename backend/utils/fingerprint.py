"""
Content fingerprints for job posting deduplication.

A fingerprint is the SHA-256 hex digest of the posting's identifying fields
(source, company, role, location, description) after normalization, so
re-scraping the same upstream posting always yields the same value while
cosmetic differences (case, whitespace) are ignored.

Usage:
    from utils.fingerprint import compute_fingerprint

    fp = compute_fingerprint("remotive", "Acme", "Backend Engineer", "Remote", "...")
"""

import hashlib
from typing import Optional

from utils.text import collapse_whitespace

# Field separator that cannot appear after normalization
_SEPARATOR = "\x1f"


def _normalize(value: Optional[str]) -> str:
    return collapse_whitespace(value or "").lower()


def compute_fingerprint(
    source: str,
    company: str,
    role: str,
    location: Optional[str],
    description: Optional[str],
) -> str:
    """
    Compute the dedup fingerprint of a posting.

    Returns:
        64-char lowercase hex string
    """
    parts = [_normalize(part) for part in (source, company, role, location, description)]
    joined = _SEPARATOR.join(parts)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()
