"""
Operator control surface for the enrichment queue.

query():
    {"stats": {...}, "stuck": [{id, company, role, status, attempts, last_attempt_at}, ...]}

trigger(body) takes exactly one action:
    {"jobId": "abc", "force"?: bool}  -> enqueue one record
    {"all": true}                     -> enqueue every unenriched record
    {"reset": true}                   -> move every failed record back to pending

Auth is the caller's job (see api/dependencies.py).
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel, Field, StrictBool, StrictStr, model_validator
from pydantic import ValidationError as PydanticValidationError

from enrichment.queue import EnrichmentQueue
from utils.errors import ValidationError

logger = logging.getLogger(__name__)

TRIGGER_USAGE = "Provide exactly one of { jobId }, { all: true }, or { reset: true }"


class EnrichTriggerRequest(BaseModel):
    """Body of POST /admin/jobs/enrich"""
    model_config = {"populate_by_name": True}

    job_id: Optional[StrictStr] = Field(default=None, alias="jobId", min_length=1)
    force: StrictBool = False
    all: Optional[StrictBool] = None
    reset: Optional[StrictBool] = None

    @model_validator(mode="after")
    def exactly_one_action(self) -> "EnrichTriggerRequest":
        chosen = [self.job_id is not None, self.all is True, self.reset is True]
        if sum(chosen) != 1:
            raise ValueError(TRIGGER_USAGE)
        if self.force and self.job_id is None:
            raise ValueError("force is only valid together with jobId")
        return self


def parse_trigger(body: Any) -> EnrichTriggerRequest:
    """Validate a raw trigger body, raising our ValidationError on any problem."""
    if not isinstance(body, dict):
        raise ValidationError(f"Request body must be a JSON object. {TRIGGER_USAGE}")
    try:
        return EnrichTriggerRequest.model_validate(body)
    except PydanticValidationError as e:
        details = "; ".join(err["msg"] for err in e.errors())
        raise ValidationError(f"Invalid request body: {details}") from e


class EnrichmentControl:
    """Stats query plus enqueue/reset actions for operators."""

    def __init__(self, queue: EnrichmentQueue):
        self.queue = queue

    def query(self) -> dict:
        stats = self.queue.get_stats()
        stuck = self.queue.get_stuck_jobs()
        return {
            "stats": stats.to_dict(),
            "stuck": [record.summary() for record in stuck],
        }

    def trigger(self, body: Any) -> dict:
        """
        Run one operator action.

        Raises:
            ValidationError: body doesn't name exactly one action
            NotFoundError: jobId doesn't exist
            InvalidStateError: force on a record that isn't stuck
        """
        request = parse_trigger(body)

        if request.job_id is not None:
            record = self.queue.enqueue_one(request.job_id, force=request.force)
            logger.info(f"Operator enqueue of job {request.job_id} (force={request.force}) -> {record.status.value}")
            return {
                "action": "enqueue_single",
                "job_id": record.id,
                "status": record.status.value,
                "stats": self.queue.get_stats().to_dict(),
            }

        if request.all:
            queued = self.queue.enqueue_all_unenriched()
            return {
                "action": "enqueue_all",
                "queued": queued,
                "stats": self.queue.get_stats().to_dict(),
            }

        reset = self.queue.reset_failed()
        return {
            "action": "reset_failed",
            "reset": reset,
            "stats": self.queue.get_stats().to_dict(),
        }
