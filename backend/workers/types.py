"""
Typed results returned by the scheduled workers.
"""

from dataclasses import asdict, dataclass


@dataclass
class EnrichmentRunResult:
    """
    Outcome of one enrichment batch.

    processed = enriched + failed + stale
    remaining = pending records left after the batch
    """
    processed: int = 0
    enriched: int = 0
    failed: int = 0
    stale: int = 0  # completion rejected because the record was recovered meanwhile
    remaining: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
