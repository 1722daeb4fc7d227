"""
Operator enrichment API routes.

Endpoints:
- GET  /admin/jobs/enrich    Queue stats plus stuck records
- POST /admin/jobs/enrich    One action: { jobId, force? } | { all: true } | { reset: true }

All endpoints require Authorization: Bearer <ADMIN_API_TOKEN>.

Errors are JSON {"error": message, "code": code}:
- 400 VALIDATION_ERROR: body doesn't name exactly one action
- 404 NOT_FOUND: jobId doesn't exist
- 409 INVALID_STATE: force on a record that isn't stuck
"""

import logging

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_control, require_admin
from enrichment.control import TRIGGER_USAGE, EnrichmentControl
from utils.errors import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/jobs/enrich")
async def get_enrichment_status(control: EnrichmentControl = Depends(get_control)):
    """
    Current enrichment queue state.

    Returns:
        {"stats": {unenriched, pending, processing, enriched, failed, total, total_attempts},
         "stuck": [{id, company, role, status, attempts, last_attempt_at}, ...]}
    """
    return control.query()


@router.post("/jobs/enrich")
async def trigger_enrichment(request: Request, control: EnrichmentControl = Depends(get_control)):
    """
    Trigger one enrichment action.

    Request body (exactly one):
        {"jobId": "abc", "force": false}  -> {"action": "enqueue_single", "job_id", "status", "stats"}
        {"all": true}                     -> {"action": "enqueue_all", "queued", "stats"}
        {"reset": true}                   -> {"action": "reset_failed", "reset", "stats"}
    """
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError(f"Request body must be valid JSON. {TRIGGER_USAGE}")

    return control.trigger(body)
