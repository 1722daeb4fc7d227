"""
Error kinds raised by the scraping and enrichment pipeline.

Each error carries a machine-readable `code` so the operator surface can
tell "bad input" from "state race" from "missing record".
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for pipeline errors."""
    code = "PIPELINE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PipelineError):
    """Operation referenced a job id that does not exist."""
    code = "NOT_FOUND"

    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} not found")
        self.job_id = job_id


class InvalidStateError(PipelineError):
    """A transition was attempted from a status that does not permit it."""
    code = "INVALID_STATE"

    def __init__(self, message: str, job_id: Optional[str] = None, status: Optional[str] = None):
        super().__init__(message)
        self.job_id = job_id
        self.status = status


class ValidationError(PipelineError):
    """Malformed operator trigger input."""
    code = "VALIDATION_ERROR"


class SourceFetchError(PipelineError):
    """A single upstream source failed during scraping."""
    code = "SOURCE_FETCH_ERROR"

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.reason = message


class ProviderError(PipelineError):
    """The enrichment provider could not enrich a claimed record."""
    code = "PROVIDER_ERROR"
