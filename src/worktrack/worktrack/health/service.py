from __future__ import annotations

import logging

from ..database.mysql_base import db_cursor
from .lifecycle import Lifecycle

log = logging.getLogger(__name__)


class HealthService:
    def __init__(self, conn_factory, lifecycle: Lifecycle):
        self._conn_factory = conn_factory
        self._lifecycle = lifecycle

    def liveness(self) -> dict:
        shutting_down = self._lifecycle.shutting_down
        return {
            "status": "shutting_down" if shutting_down else "ok",
            "uptimeSeconds": self._lifecycle.uptime_seconds,
            "shuttingDown": shutting_down,
        }

    def database_ok(self) -> bool:
        try:
            with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
                cur.execute("SELECT 1")
                cur.fetchall()
            return True
        except Exception as exc:
            log.warning("Readiness probe failed: %s", exc)
            return False

    def readiness(self) -> tuple[dict, bool]:
        body = self.liveness()
        database = self.database_ok()
        ready = database and not body["shuttingDown"]
        body.update({"status": "ready" if ready else "not_ready", "database": "ok" if database else "unavailable"})
        return body, ready
