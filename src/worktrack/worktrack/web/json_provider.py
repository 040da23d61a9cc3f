from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

from flask.json.provider import DefaultJSONProvider


class WorktrackJSONProvider(DefaultJSONProvider):
    """JSON encoding for MySQL row values.

    DATETIME/DATE as ISO strings, TIME (returned as timedelta) as HH:MM:SS,
    DECIMAL as float.
    """

    sort_keys = False

    @staticmethod
    def default(o: Any) -> Any:
        if isinstance(o, datetime):
            return o.isoformat(sep=" ")
        if isinstance(o, date):
            return o.isoformat()
        if isinstance(o, timedelta):
            seconds = int(o.total_seconds()) % 86400
            return f"{seconds // 3600:02d}:{seconds % 3600 // 60:02d}:{seconds % 60:02d}"
        if isinstance(o, Decimal):
            return float(o)
        if isinstance(o, (bytes, bytearray)):
            return o.decode("utf-8", errors="replace")
        return DefaultJSONProvider.default(o)
