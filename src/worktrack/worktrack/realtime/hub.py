"""Registry of connected desktop clients.

The hub is transport-agnostic: a connection is anything with ``is_open``,
``send(text)``, ``ping()``, ``take_pong()``, ``close(code, reason)`` and
``terminate()``. The flask-sock route adapts real sockets, tests use
in-memory fakes. Writes go through a per-session :class:`Outbox`;
``terminate()`` is called directly since the writer may be stuck.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Optional, Protocol

from ..common.validators import positive_int
from ..core.constants import (
    DEFAULT_HEARTBEAT_SECONDS,
    DEFAULT_OUTBOX_CAPACITY,
    DEFAULT_WS_PATH,
    FORBIDDEN_CLOSE_CODE,
)
from ..events.bus import ChangeBus, ChangeEvent
from .outbox import Outbox

log = logging.getLogger(__name__)


class DesktopConnection(Protocol):
    @property
    def is_open(self) -> bool:
        raise NotImplementedError

    def send(self, text: str) -> None:
        raise NotImplementedError

    def ping(self) -> None:
        """Send a protocol-level ping frame."""
        raise NotImplementedError

    def take_pong(self) -> bool:
        """True when a pong arrived since the previous call."""
        raise NotImplementedError

    def close(self, code: int = 1000, reason: str = "") -> None:
        raise NotImplementedError

    def terminate(self) -> None:
        raise NotImplementedError


@dataclass(eq=False)
class ClientSession:
    connection: DesktopConnection
    outbox: Outbox
    auth_user_id: Optional[int] = None
    remote: str = "unknown"
    alive: bool = True
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    dropped: int = 0

    @property
    def label(self) -> Optional[str]:
        if self.user_name:
            return self.user_name
        return f"User #{self.user_id}" if self.user_id else None


class DesktopHub:
    def __init__(
        self,
        *,
        name_resolver: Callable[[int], str],
        auth_required: bool = False,
        heartbeat_seconds: float = DEFAULT_HEARTBEAT_SECONDS,
        endpoint: str = DEFAULT_WS_PATH,
        outbox_capacity: int = DEFAULT_OUTBOX_CAPACITY,
        clock: Callable[[], float] = time.time,
    ):
        self._name_resolver = name_resolver
        self._auth_required = auth_required
        self._heartbeat_seconds = float(heartbeat_seconds)
        self._endpoint = endpoint
        self._outbox_capacity = outbox_capacity
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: set[ClientSession] = set()
        self._stop = threading.Event()
        self._heartbeat: Optional[threading.Thread] = None

    @property
    def client_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _send(self, session: ClientSession, message: dict) -> bool:
        return self._send_text(session, json.dumps(message))

    def _send_text(self, session: ClientSession, text: str) -> bool:
        if not session.connection.is_open:
            return False
        return self._enqueue(session, partial(self._write, session, text))

    def _enqueue(self, session: ClientSession, action: Callable[[], None]) -> bool:
        if session.outbox.put(action):
            return True
        session.dropped += 1
        if session.dropped == 1 or session.dropped % 100 == 0:
            log.warning("Desktop client %s is not reading, %d frame(s) dropped", session.remote, session.dropped)
        return False

    @staticmethod
    def _write(session: ClientSession, text: str) -> None:
        connection = session.connection
        if not connection.is_open:
            return
        try:
            connection.send(text)
        except Exception as exc:
            log.warning("Send to desktop client %s failed: %s", session.remote, exc)

    @staticmethod
    def _ping(session: ClientSession) -> None:
        if not session.connection.is_open:
            return
        try:
            session.connection.ping()
        except Exception as exc:
            log.warning("Ping to desktop client %s failed: %s", session.remote, exc)

    @staticmethod
    def _close(session: ClientSession, code: int, reason: str) -> None:
        if not session.connection.is_open:
            return
        try:
            session.connection.close(code, reason)
        except Exception as exc:
            log.debug("Close of desktop client %s failed: %s", session.remote, exc)

    # Connection lifecycle

    def open(self, connection: DesktopConnection, *, auth_user_id: Optional[int] = None, remote: str = "unknown") -> ClientSession:
        outbox = Outbox(capacity=self._outbox_capacity, name=f"desktop-outbox-{remote}")
        session = ClientSession(connection=connection, outbox=outbox, auth_user_id=auth_user_id, remote=remote)
        with self._lock:
            self._sessions.add(session)
        self._send(session, {"type": "connected", "endpoint": self._endpoint, "ts": self._now_ms()})
        log.info("Desktop connected (%s)", remote)
        return session

    def close(self, session: ClientSession) -> None:
        with self._lock:
            if session not in self._sessions:
                return
            self._sessions.discard(session)
        session.outbox.stop()
        if session.label:
            log.info("Desktop user %s disconnected", session.label)

    def flush(self, timeout: float = 1.0) -> bool:
        """Wait for every session's queued frames to be written."""

        deadline = time.monotonic() + timeout
        with self._lock:
            sessions = list(self._sessions)
        return all(s.outbox.drain(deadline - time.monotonic()) for s in sessions)

    # Inbound messages

    def handle_message(self, session: ClientSession, raw: Any) -> None:
        session.alive = True
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8", errors="replace")
        try:
            payload = json.loads(raw) if raw is not None else None
        except ValueError:
            return
        if not isinstance(payload, dict):
            return

        kind = payload.get("type")
        if kind == "ping":
            self._send(session, {"type": "pong", "ts": self._now_ms()})
        elif kind == "identify":
            self._identify(session, positive_int(payload.get("userId")))
        elif kind == "subscribe":
            self._send(session, {"type": "subscribed", "ok": True, "ts": self._now_ms()})

    def _identify(self, session: ClientSession, user_id: int) -> None:
        if not user_id:
            return
        if self._auth_required and session.auth_user_id and session.auth_user_id != user_id:
            self._send(session, {"type": "identified", "ok": False, "error": "Forbidden", "ts": self._now_ms()})
            self._enqueue(session, partial(self._close, session, FORBIDDEN_CLOSE_CODE, "Forbidden"))
            log.warning("Desktop identify as %s refused for token user %s", user_id, session.auth_user_id)
            return
        session.user_id = user_id
        session.user_name = self._name_resolver(user_id)
        log.info("Desktop user %s connected", session.user_name)
        self._send(session, {"type": "identified", "ok": True, "userId": user_id, "ts": self._now_ms()})

    # Fan-out

    def broadcast(self, event: ChangeEvent | dict) -> int:
        """Queue the event for every open socket; returns how many accepted it."""

        message = event.to_dict() if isinstance(event, ChangeEvent) else dict(event)
        with self._lock:
            sessions = list(self._sessions)
        if not sessions:
            return 0
        text = json.dumps(message)
        delivered = sum(1 for s in sessions if self._send_text(s, text))
        log.info("Broadcasted %s event to %d desktop client(s)", message.get("type"), delivered)
        return delivered

    def attach(self, bus: ChangeBus) -> Callable[[], None]:
        return bus.subscribe(self.broadcast)

    # Liveness

    def sweep(self) -> int:
        """One heartbeat round; returns how many silent clients were dropped.

        A client counts as alive when it sent any frame or answered the
        previous ping since the last round.
        """

        with self._lock:
            sessions = list(self._sessions)
        dropped = 0
        for session in sessions:
            connection = session.connection
            answered = connection.take_pong()
            if not (session.alive or answered):
                log.info("Terminating unresponsive desktop client %s", session.label or session.remote)
                try:
                    connection.terminate()
                except Exception as exc:
                    log.warning("Terminate failed for %s: %s", session.remote, exc)
                self.close(session)
                dropped += 1
                continue
            session.alive = False
            if connection.is_open:
                self._enqueue(session, partial(self._ping, session))
        return dropped

    def start_heartbeat(self) -> None:
        with self._lock:
            if self._heartbeat is not None or self._stop.is_set():
                return
            self._heartbeat = threading.Thread(target=self._heartbeat_loop, name="desktop-heartbeat", daemon=True)
        self._heartbeat.start()

    def _heartbeat_loop(self) -> None:
        while not self._stop.wait(self._heartbeat_seconds):
            try:
                self.sweep()
            except Exception:
                log.exception("Heartbeat sweep failed")

    def shutdown(self, timeout: float = 1.0) -> None:
        """Stop the heartbeat and close every client (server shutdown)."""

        self._stop.set()
        deadline = time.monotonic() + timeout
        with self._lock:
            sessions = list(self._sessions)
            self._sessions.clear()
            thread, self._heartbeat = self._heartbeat, None
        for session in sessions:
            self._enqueue(session, partial(self._close, session, 1001, "Server shutting down"))
            session.outbox.stop()
        for session in sessions:
            session.outbox.join(deadline - time.monotonic())
        if thread is not None:
            thread.join(timeout=max(0.0, deadline - time.monotonic()))
        log.info("Desktop hub stopped (%d client(s) closed)", len(sessions))
