"""
FastAPI dependencies: bearer-token guards and pipeline objects per request.

Usage in route:
    @router.get("/jobs/enrich", dependencies=[Depends(require_admin)])
    async def get_status(control: EnrichmentControl = Depends(get_control)):
        return control.query()
"""

import hmac
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from config.settings import settings
from db.session import get_db
from db.sql_store import SqlRecordStore
from enrichment.control import EnrichmentControl
from enrichment.provider import BasicEnrichmentProvider, EnrichmentProvider
from enrichment.queue import EnrichmentQueue
from sources.base_source import BaseJobSource
from sources.registry import get_enabled_sources

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 from us, not a FastAPI default
security = HTTPBearer(auto_error=False)


def _check_bearer(
    credentials: Optional[HTTPAuthorizationCredentials],
    expected: str,
    setting_name: str,
) -> None:
    """
    Compare the bearer token against a configured secret.

    Raises:
        HTTPException 500: secret not configured
        HTTPException 401: header missing or token wrong
    """
    if not expected:
        logger.error(f"{setting_name} not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server misconfiguration",
        )

    token = credentials.credentials if credentials else ""
    if not hmac.compare_digest(token.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> None:
    """Operator endpoints: Authorization: Bearer <ADMIN_API_TOKEN>"""
    _check_bearer(credentials, settings.ADMIN_API_TOKEN, "ADMIN_API_TOKEN")


async def require_cron_secret(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> None:
    """Scheduler endpoints: Authorization: Bearer <CRON_SECRET>"""
    _check_bearer(credentials, settings.CRON_SECRET, "CRON_SECRET")


def get_record_store(db: Session = Depends(get_db)) -> SqlRecordStore:
    return SqlRecordStore(db)


def get_queue(store: SqlRecordStore = Depends(get_record_store)) -> EnrichmentQueue:
    return EnrichmentQueue.from_settings(store, settings)


def get_control(queue: EnrichmentQueue = Depends(get_queue)) -> EnrichmentControl:
    return EnrichmentControl(queue)


def get_provider() -> EnrichmentProvider:
    return BasicEnrichmentProvider()


def get_sources() -> list[BaseJobSource]:
    return get_enabled_sources(settings)
