"""Timezone-aware clock used as the default for injectable `clock` arguments."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
