"""
Normalized posting produced by every source adapter.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from utils.fingerprint import compute_fingerprint
from utils.text import remove_nul


@dataclass
class RawPosting:
    """
    One posting as scraped, before it becomes a JobRecord.

    `source` is the adapter name; `source_id` the upstream identifier.
    """
    source: str
    company: str
    role: str
    location: str
    description: str = ""
    url: Optional[str] = None
    source_id: Optional[str] = None
    posted_at: Optional[str] = None
    salary: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def fingerprint(self) -> str:
        return compute_fingerprint(self.source, self.company, self.role, self.location, self.description)

    def to_payload(self) -> dict[str, Any]:
        """Raw fields stored on the JobRecord (opaque to the queue), NULs removed."""
        payload: dict[str, Any] = {
            "company": self.company,
            "role": self.role,
            "location": self.location,
            "description": self.description,
            "url": self.url,
            "posted_at": self.posted_at,
            "salary": self.salary,
            "tags": list(self.tags),
        }
        payload.update(self.extra)
        return remove_nul(payload)
