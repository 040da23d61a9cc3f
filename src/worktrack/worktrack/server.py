"""Threaded WSGI server with graceful shutdown.

SIGTERM/SIGINT stop the accept loop; then desktop sockets are closed, in-flight
requests get ``SHUTDOWN_GRACE_SECONDS`` to finish, and the change bus and
database pool are released. Request threads still running after the grace
window are daemon threads and die with the process.
"""
from __future__ import annotations

import logging
import signal
import threading

from flask import Flask
from werkzeug.serving import make_server

from .container import Container
from .main import get_container

log = logging.getLogger(__name__)


def graceful_shutdown(container: Container, server=None) -> bool:
    """Release everything the app holds; returns False when requests were cut off."""

    lifecycle = container.lifecycle
    lifecycle.begin_shutdown()
    container.hub.shutdown()

    grace = container.settings.shutdown_grace_seconds
    drained = lifecycle.wait_for_drain(grace)
    if drained:
        log.info("All in-flight requests finished")
    else:
        log.warning("Grace window of %ss elapsed with %d request(s) in flight, forcing close", grace, lifecycle.in_flight)

    if server is not None:
        server.server_close()
    container.bus.close()
    container.db.close()
    log.info("Shutdown complete")
    return drained


def serve(app: Flask, *, host: str = "0.0.0.0", port: int = 3000) -> None:
    container = get_container(app)
    server = make_server(host, port, app, threaded=True)

    def request_stop(signum, _frame):
        log.info("Received %s, shutting down", signal.Signals(signum).name)
        container.lifecycle.begin_shutdown()
        # shutdown() waits for serve_forever(), which runs in this very thread.
        threading.Thread(target=server.shutdown, name="server-shutdown", daemon=True).start()

    signal.signal(signal.SIGTERM, request_stop)
    signal.signal(signal.SIGINT, request_stop)

    log.info("Listening on http://%s:%s (desktop socket at %s)", host, port, container.settings.ws_path)
    try:
        server.serve_forever()
    finally:
        graceful_shutdown(container, server)
