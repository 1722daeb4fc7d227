"""
Enrichment Worker Lambda Handler

Invoked on a schedule (EventBridge) or through POST /cron/enrich.

Event format:
{
    "batch_size": 10,       // Optional: overrides ENRICH_BATCH_SIZE
    "use_test_db": false    // Optional: when true, uses TEST_DATABASE_URL (for local dev)
}

Workflow:
1. claim_batch(batch_size): pending → processing (atomic per record)
2. For each claimed record: provider.enrich(record)
   - success → complete_success (processing → enriched)
   - provider error → complete_failure (processing → failed), never re-raised
   - completion rejected (record recovered by an operator meanwhile) → counted as stale
3. Report remaining pending count

A crash between claim and completion leaves records in processing; they are
only recovered by an operator (enqueue with force once stuck). No automatic retry.

Log Format:
All logs use prefix [EnrichmentWorker:batch=X] / [EnrichmentWorker:batch=X:job=Y].
"""

import logging
import uuid
from typing import Optional

from config.settings import settings
from db.session import SessionLocal, get_test_session_local
from db.sql_store import SqlRecordStore
from enrichment.provider import BasicEnrichmentProvider, EnrichmentProvider
from enrichment.queue import EnrichmentQueue
from utils.errors import InvalidStateError
from utils.worker_logging import EnrichmentLogContext
from workers.types import EnrichmentRunResult

logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Stored failure reasons are capped
MAX_ERROR_LENGTH = 1000


def run_enrichment_batch(
    queue: EnrichmentQueue,
    provider: EnrichmentProvider,
    batch_size: int,
    log: Optional[EnrichmentLogContext] = None,
) -> EnrichmentRunResult:
    """
    Claim one batch and run the provider over it.

    Args:
        queue: Enrichment queue
        provider: Enrichment provider
        batch_size: Max records to claim
        log: Log context (a new batch id is generated when omitted)

    Returns:
        EnrichmentRunResult with per-outcome counts and remaining pending
    """
    log = log or EnrichmentLogContext(uuid.uuid4().hex[:8])
    result = EnrichmentRunResult()

    batch = queue.claim_batch(batch_size)
    log.log_info(f"Claimed {len(batch)} jobs (batch_size={batch_size})")

    for record in batch:
        job_log = log.for_job(record.id)
        attempt = record.enrichment.attempts
        result.processed += 1

        try:
            fields = provider.enrich(record)
        except Exception as e:
            reason = (str(e) or type(e).__name__)[:MAX_ERROR_LENGTH]
            job_log.log_warning(f"Enrichment failed (attempt {attempt}): {reason}")
            try:
                queue.complete_failure(record.id, reason, attempt=attempt)
                result.failed += 1
            except InvalidStateError as state_error:
                job_log.log_warning(f"Failure not recorded, record moved on: {state_error.message}")
                result.stale += 1
            continue

        try:
            queue.complete_success(record.id, fields, attempt=attempt)
            result.enriched += 1
            job_log.log_info(f"Enriched (attempt {attempt})")
        except InvalidStateError as state_error:
            job_log.log_warning(f"Result discarded, record moved on: {state_error.message}")
            result.stale += 1

    result.remaining = queue.get_stats().pending
    log.log_info(
        f"Batch complete - processed={result.processed} enriched={result.enriched} "
        f"failed={result.failed} stale={result.stale} remaining={result.remaining}"
    )
    return result


# =============================================================================
# Lambda Handler
# =============================================================================

def handler(event: dict, context) -> dict:
    """
    Lambda handler for the scheduled enrichment worker.

    Args:
        event: {
            batch_size: int  // Optional
            use_test_db: bool  // Optional: when true, uses TEST_DATABASE_URL
        }
        context: Lambda context (unused)

    Returns:
        EnrichmentRunResult as a dict
    """
    event = event or {}
    use_test_db = bool(event.get("use_test_db", False))
    raw_batch_size = event.get("batch_size")
    batch_size = int(raw_batch_size) if raw_batch_size is not None else settings.ENRICH_BATCH_SIZE

    log = EnrichmentLogContext(uuid.uuid4().hex[:8], use_test_db=use_test_db)

    # Choose database based on use_test_db flag
    if use_test_db:
        log.log_info("Using TEST database")
        db = get_test_session_local()()
    else:
        db = SessionLocal()

    try:
        queue = EnrichmentQueue.from_settings(SqlRecordStore(db), settings)
        result = run_enrichment_batch(queue, BasicEnrichmentProvider(), batch_size, log=log)
        return result.to_dict()
    except Exception as e:
        log.log_error(f"Worker error: {e}")
        raise
    finally:
        db.close()
