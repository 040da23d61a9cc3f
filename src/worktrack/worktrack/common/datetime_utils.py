from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_client_timestamp(value: Any, *, default: Optional[datetime] = None) -> datetime:
    """Parse an ISO-8601 timestamp sent by a client into a naive local datetime.

    Aware values (``...Z`` or with an offset) are converted to local time, which
    is what DATETIME columns store.
    """

    if value is None or value == "":
        return default or now_local()
    if isinstance(value, datetime):
        parsed = value
    else:
        raw = str(value).strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_mysql_datetime(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")


def diff_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two datetimes, never negative."""

    minutes = int((end - start).total_seconds() // 60)
    return minutes if minutes > 0 else 0


def parse_clock_minutes(value: Any) -> Optional[int]:
    """Parse ``HH:MM`` into minutes after midnight, None when malformed."""

    parts = str(value or "").split(":")
    if len(parts) < 2:
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None
    if hours < 0 or hours > 23 or minutes < 0 or minutes > 59:
        return None
    return hours * 60 + minutes
