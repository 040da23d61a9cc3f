from __future__ import annotations

import logging
import socket

from flask import Flask, g, request
from flask_sock import Sock
from simple_websocket import ConnectionClosed
from wsproto.events import Ping

from ..container import Container
from ..core.exceptions import AuthenticationError
from ..web.errors import error_response

log = logging.getLogger(__name__)


def is_websocket_upgrade() -> bool:
    return (
        request.headers.get("Upgrade", "").lower() == "websocket"
        and "upgrade" in request.headers.get("Connection", "").lower()
    )


class FlaskSockConnection:
    """Adapts a flask-sock (simple-websocket) server socket to the hub.

    Only the session outbox writes application frames; simple-websocket's
    reader thread answers pings and records pongs on its own.
    """

    def __init__(self, ws):
        self._ws = ws

    @property
    def is_open(self) -> bool:
        return bool(self._ws.connected)

    def send(self, text: str) -> None:
        self._ws.send(text)

    def ping(self) -> None:
        self._ws.sock.send(self._ws.ws.send(Ping()))

    def take_pong(self) -> bool:
        # pong_received is set by simple-websocket when a Pong frame arrives.
        if not self._ws.pong_received:
            return False
        self._ws.pong_received = False
        return True

    def close(self, code: int = 1000, reason: str = "") -> None:
        self._ws.close(reason=code, message=reason)

    def terminate(self) -> None:
        self._ws.connected = False
        raw = getattr(self._ws, "sock", None)
        if raw is None:
            return
        try:
            raw.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass


def register(app: Flask, container: Container) -> None:
    sock = Sock(app)
    hub = container.hub
    guard = container.auth_guard
    ws_path = container.settings.ws_path

    @app.before_request
    def authorize_websocket_upgrade():
        if not is_websocket_upgrade():
            return None
        if request.path != ws_path:
            return error_response("Not found", 404)
        try:
            guard.load_principal()
        except AuthenticationError as exc:
            return error_response(str(exc), 401)
        return None

    @sock.route(ws_path, endpoint="desktop_ws")
    def desktop_ws(ws):
        principal = g.get("principal")
        connection = FlaskSockConnection(ws)
        session = hub.open(
            connection,
            auth_user_id=principal.user_id if principal else None,
            remote=request.remote_addr or "unknown",
        )
        hub.start_heartbeat()
        try:
            while connection.is_open:
                hub.handle_message(session, ws.receive())
        except ConnectionClosed:
            pass
        finally:
            hub.close(session)
