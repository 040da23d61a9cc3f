"""Desktop side of the realtime channel.

Keeps one WebSocket open to the backend, identifies the signed-in user, and
hands ``db-changed`` events to a callback so the client can re-fetch. Lost
connections are retried with :class:`ReconnectBackoff`; a 4403 close means the
server refused the identity and the client stops.
"""
from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Optional
from urllib.parse import urlsplit, urlunsplit

import simple_websocket

from ..core.constants import DEFAULT_WS_PATH, FORBIDDEN_CLOSE_CODE
from .backoff import ReconnectBackoff

log = logging.getLogger(__name__)


def websocket_url(base_url: str, path: str = DEFAULT_WS_PATH) -> Optional[str]:
    """Turn ``BACKEND_BASE_URL`` (http or https, any path) into the socket URL."""

    parts = urlsplit(str(base_url or "").strip())
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    scheme = "wss" if parts.scheme == "https" else "ws"
    return urlunsplit((scheme, parts.netloc, path, "", ""))


def _connect(url: str, headers: dict):
    return simple_websocket.Client.connect(url, headers=headers)


class DesktopRealtimeClient:
    def __init__(
        self,
        url: str,
        user_id: int,
        *,
        on_db_changed: Callable[[dict], Any],
        token: Optional[str] = None,
        backoff: Optional[ReconnectBackoff] = None,
        connect: Callable[[str, dict], Any] = _connect,
        sleep: Optional[Callable[[float], Any]] = None,
    ):
        self.url = url
        self.user_id = int(user_id)
        self._on_db_changed = on_db_changed
        self._token = token
        self.backoff = backoff or ReconnectBackoff()
        self._connect = connect
        self._stop = threading.Event()
        self._sleep = sleep or self._stop.wait
        self._ws = None
        self._thread: Optional[threading.Thread] = None
        self.forbidden = False

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self._token}"} if self._token else {}

    def _send(self, message: dict) -> None:
        if self._ws is not None:
            self._ws.send(json.dumps(message))

    def handle_message(self, raw: Any) -> None:
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError):
            return
        if not isinstance(payload, dict):
            return
        kind = payload.get("type")
        if kind == "ping":
            self._send({"type": "pong"})
        elif kind == "db-changed":
            try:
                self._on_db_changed(payload)
            except Exception:
                log.exception("db-changed handler failed")
        elif kind == "identified" and not payload.get("ok"):
            log.warning("Server refused identity user=%s: %s", self.user_id, payload.get("error"))

    def run_once(self) -> Optional[int]:
        """Hold one connection until it closes; returns the close code if known."""

        try:
            self._ws = self._connect(self.url, self._headers())
        except Exception as exc:
            log.warning("Realtime connection to %s failed: %s", self.url, exc)
            return None

        self.backoff.connected()
        log.info("Connected to %s as user=%s", self.url, self.user_id)
        code: Optional[int] = None
        try:
            self._send({"type": "identify", "userId": self.user_id})
            while not self._stop.is_set():
                self.handle_message(self._ws.receive())
        except simple_websocket.ConnectionClosed as exc:
            code = exc.reason
            log.warning("Realtime connection closed (code=%s)", code)
        finally:
            self.backoff.disconnected()
            ws, self._ws = self._ws, None
            try:
                ws.close()
            except Exception as exc:
                log.debug("Close after disconnect failed: %s", exc)
        return code

    def run(self) -> None:
        while not self._stop.is_set():
            code = self.run_once()
            if code == FORBIDDEN_CLOSE_CODE:
                self.forbidden = True
                log.warning("Realtime identity forbidden, not reconnecting")
                return
            if self._stop.is_set():
                return
            delay = self.backoff.next_delay()
            log.info("Reconnecting in %.1fs", delay)
            self._sleep(delay)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="desktop-realtime", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        ws = self._ws
        if ws is not None:
            try:
                ws.close()
            except Exception as exc:
                log.debug("Close on stop failed: %s", exc)
        if self._thread is not None:
            self._thread.join(timeout=2)
            self._thread = None
