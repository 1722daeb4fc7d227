"""
Database engines and sessions for the record store.

Local runs read DATABASE_URL / TEST_DATABASE_URL from .env.local (or .env);
inside Lambda the variables come from the function configuration and env
files are never consulted.

Usage:
    from db.session import SessionLocal
    from db.sql_store import SqlRecordStore

    db = SessionLocal()
    try:
        store = SqlRecordStore(db)
        ...
    finally:
        db.close()
"""
import os
from functools import lru_cache
from pathlib import Path
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

# AWS_LAMBDA_FUNCTION_NAME is only set by the Lambda runtime
if os.getenv("AWS_LAMBDA_FUNCTION_NAME") is None:
    _backend_dir = Path(__file__).parent.parent
    for _candidate in (_backend_dir / ".env.local", _backend_dir / ".env"):
        if _candidate.exists():
            load_dotenv(_candidate, override=True)
            break


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ValueError(f"{name} not found in environment variables")
    return value


def make_engine(url: str) -> Engine:
    """Engine with connection health checks; connections recycled hourly."""
    return create_engine(url, pool_pre_ping=True, pool_recycle=3600)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


DATABASE_URL = _require_env("DATABASE_URL")
engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)


@lru_cache(maxsize=1)
def get_test_session_local() -> sessionmaker:
    """
    Session factory bound to TEST_DATABASE_URL.

    Used by workers when an event carries use_test_db=true (local dev runs).
    Built on first use so production never needs the variable.
    """
    return make_session_factory(make_engine(_require_env("TEST_DATABASE_URL")))


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding one session per request.

    Usage:
        @router.get("/admin/jobs/enrich")
        def read_stats(db: Session = Depends(get_db)):
            return EnrichmentQueue(SqlRecordStore(db)).get_stats()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
