"""
Worker logging utilities with Protocol + Mixin pattern.

Provides trait-like logging functionality for scheduled workers.
Each worker defines its type and context format, the mixin provides
consistent log_info/log_warning/log_error methods.

Usage:
    class EnrichmentLogContext(WorkerLoggerMixin):
        worker_type = WorkerType.ENRICHMENT

        def __init__(self, batch_id: str, job_id: str | None = None):
            self.batch_id = batch_id
            self.job_id = job_id

        def _log_context(self) -> str:
            return f"batch={self.batch_id}:job={self.job_id}"

    ctx = EnrichmentLogContext("a1b2", "9f3e")
    ctx.log_info("Enriched")  # [EnrichmentWorker:batch=a1b2:job=9f3e] Enriched
"""

import logging
from enum import Enum
from typing import Optional, Protocol

logger = logging.getLogger()
logger.setLevel(logging.INFO)


class WorkerType(Enum):
    """Worker type enum for log prefix identification."""
    SCRAPE = "ScrapeWorker"
    ENRICHMENT = "EnrichmentWorker"


class WorkerLoggerProtocol(Protocol):
    """
    Protocol defining what classes using WorkerLoggerMixin must provide.

    This enables type checking - mypy will error if a class uses the mixin
    but doesn't define worker_type or _log_context().
    """
    worker_type: WorkerType

    def _log_context(self) -> str:
        """Return context string like 'run=20250101T0900' or 'batch=a1b2:job=9f3e'."""
        ...


class WorkerLoggerMixin:
    """
    Mixin providing log_info/log_warning/log_error methods.

    Classes using this mixin must satisfy WorkerLoggerProtocol:
    - Define worker_type: WorkerType class attribute
    - Implement _log_context() -> str method

    Log format: [WorkerType:context] message
    With test DB: [TEST][WorkerType:context] message

    Examples:
    - [ScrapeWorker:run=20250101T090000] Fetched 3 sources
    - [TEST][EnrichmentWorker:batch=a1b2:job=9f3e] Enriched
    """

    # Set by subclass __init__ to add [TEST] prefix
    use_test_db: bool = False

    def _log_prefix(self: WorkerLoggerProtocol) -> str:
        """Build log prefix from worker type and context."""
        test_prefix = "[TEST]" if getattr(self, 'use_test_db', False) else ""
        return f"{test_prefix}[{self.worker_type.value}:{self._log_context()}]"

    def log_info(self: WorkerLoggerProtocol, message: str) -> None:
        """Log info message with worker prefix."""
        logger.info(f"{self._log_prefix()} {message}")

    def log_warning(self: WorkerLoggerProtocol, message: str) -> None:
        """Log warning message with worker prefix."""
        logger.warning(f"{self._log_prefix()} {message}")

    def log_error(self: WorkerLoggerProtocol, message: str) -> None:
        """Log error message with worker prefix."""
        logger.error(f"{self._log_prefix()} {message}")


# =============================================================================
# Concrete Context Classes
# =============================================================================

class ScrapeLogContext(WorkerLoggerMixin):
    """
    Logging context for ScrapeWorker.

    Log format: [ScrapeWorker:run=LABEL] message
    With source: [ScrapeWorker:run=LABEL:source=NAME] message
    """
    worker_type = WorkerType.SCRAPE

    def __init__(self, run_label: str, source: Optional[str] = None, use_test_db: bool = False):
        self.run_label = run_label
        self.source = source
        self.use_test_db = use_test_db

    def for_source(self, source: str) -> "ScrapeLogContext":
        return ScrapeLogContext(self.run_label, source, use_test_db=self.use_test_db)

    def _log_context(self) -> str:
        if self.source:
            return f"run={self.run_label}:source={self.source}"
        return f"run={self.run_label}"


class EnrichmentLogContext(WorkerLoggerMixin):
    """
    Logging context for EnrichmentWorker.

    Log format: [EnrichmentWorker:batch=ID] message
    With job: [EnrichmentWorker:batch=ID:job=JOB_ID] message
    """
    worker_type = WorkerType.ENRICHMENT

    def __init__(self, batch_id: str, job_id: Optional[str] = None, use_test_db: bool = False):
        self.batch_id = batch_id
        self.job_id = job_id
        self.use_test_db = use_test_db

    def for_job(self, job_id: str) -> "EnrichmentLogContext":
        return EnrichmentLogContext(self.batch_id, job_id, use_test_db=self.use_test_db)

    def _log_context(self) -> str:
        if self.job_id:
            return f"batch={self.batch_id}:job={self.job_id}"
        return f"batch={self.batch_id}"
