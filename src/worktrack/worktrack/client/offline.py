"""Local SQLite queue for activity calls made while offline.

Payloads are replayed in insertion order by :meth:`OfflineActivityQueue.sync`.
The server treats replays idempotently, so a row is cleared whenever the
server answered ``success`` (including ``duplicate`` and ``ignored``).
"""
from __future__ import annotations

import json
import logging
import sqlite3
import threading
import uuid as uuid_lib
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from .api import BackendApi, BackendError
from .network import is_online

log = logging.getLogger(__name__)

START_UNALLOCATED = "start"
START_TASK = "start-task"
COMPLETE = "complete"


@dataclass(frozen=True)
class SyncReport:
    synced: int
    failed: int
    remaining: int

    def to_dict(self) -> dict:
        return {"success": True, "synced": self.synced, "failed": self.failed, "remaining": self.remaining}


def _utc_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


class OfflineActivityQueue:
    def __init__(
        self,
        api: BackendApi,
        path: str | Path = ":memory:",
        *,
        online: Callable[[], bool] = is_online,
        uuid_factory: Callable[[], str] = lambda: str(uuid_lib.uuid4()),
        clock: Callable[[], str] = _utc_iso,
    ):
        self._api = api
        self._online = online
        self._uuid_factory = uuid_factory
        self._clock = clock
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS sync_queue (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                payload TEXT NOT NULL,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    def pending(self) -> list[dict]:
        with self._lock:
            rows = self._conn.execute("SELECT payload FROM sync_queue ORDER BY id").fetchall()
        return [json.loads(r["payload"]) for r in rows]

    def enqueue(self, payload: dict) -> None:
        with self._lock:
            self._conn.execute("INSERT INTO sync_queue(payload) VALUES(?)", (json.dumps(payload),))
            self._conn.commit()

    def _has_queued(self, uuid: str) -> bool:
        return any(p.get("uuid") == uuid for p in self.pending())

    def _submit(self, kind: str, payload: dict) -> dict:
        """Send now when online, otherwise queue; the uuid is fixed either way."""

        payload = {**payload, "type": kind, "timestamp": payload.get("timestamp") or self._clock()}
        if self._online() and not self._has_queued(payload["uuid"]):
            try:
                return self._send(kind, payload)
            except (BackendError, OSError) as exc:
                log.warning("Sending %s %s failed, queueing: %s", kind, payload["uuid"], exc)
        self.enqueue(payload)
        log.info("Offline mode: queued %s (uuid=%s)", kind, payload["uuid"])
        return {"success": True, "queued": True, "uuid": payload["uuid"]}

    def start_unallocated(self, user_id: int, activity_id: Optional[int] = None) -> dict:
        payload = {"uuid": self._uuid_factory(), "user_id": user_id}
        if activity_id:
            payload["activity_id"] = activity_id
        return self._submit(START_UNALLOCATED, payload)

    def start_task(self, user_id: int, project_id: int, task_id: int, item_id: Optional[int] = None) -> dict:
        payload = {
            "uuid": self._uuid_factory(),
            "user_id": user_id,
            "project_id": project_id,
            "task_id": task_id,
            "item_id": item_id,
        }
        return self._submit(START_TASK, payload)

    def complete(
        self,
        uuid: str,
        user_id: int,
        *,
        task_completed: bool = False,
        note: Optional[str] = None,
        task_data: Optional[list] = None,
    ) -> dict:
        payload = {
            "uuid": uuid,
            "user_id": user_id,
            "is_completed_project_task": 1 if task_completed else 0,
            "note": note,
            "taskData": task_data or [],
        }
        return self._submit(COMPLETE, payload)

    def _send(self, kind: str, payload: dict) -> dict:
        if kind == START_UNALLOCATED:
            return self._api.start_unallocated(payload)
        if kind == START_TASK:
            return self._api.start_task(payload)
        if kind == COMPLETE:
            return self._api.complete(payload)
        raise ValueError(f"Unknown payload type: {kind}")

    def sync(self) -> SyncReport:
        with self._lock:
            rows = self._conn.execute("SELECT id, payload FROM sync_queue ORDER BY id").fetchall()

        # A record's start and complete must reach the server in order, so
        # once one row for a uuid fails the later rows for it wait.
        held: set[str] = set()
        synced = failed = 0
        for row in rows:
            payload = json.loads(row["payload"])
            uuid = payload.get("uuid")
            if uuid in held:
                continue
            try:
                result = self._send(payload.get("type"), payload)
            except ValueError as exc:
                log.warning("Skipping queued record %s: %s", row["id"], exc)
                failed += 1
                continue
            except (BackendError, OSError) as exc:
                log.warning("Failed to sync uuid=%s type=%s: %s", payload.get("uuid"), payload.get("type"), exc)
                failed += 1
                held.add(uuid)
                continue

            if isinstance(result, dict) and result.get("success"):
                with self._lock:
                    self._conn.execute("DELETE FROM sync_queue WHERE id=?", (row["id"],))
                    self._conn.commit()
                synced += 1
                log.info("Synced and cleared uuid=%s type=%s", payload.get("uuid"), payload.get("type"))
            else:
                failed += 1
                held.add(uuid)

        with self._lock:
            remaining = self._conn.execute("SELECT COUNT(*) FROM sync_queue").fetchone()[0]
        return SyncReport(synced=synced, failed=failed, remaining=int(remaining))
