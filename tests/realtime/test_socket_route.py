import json
import threading
import time

import pytest
from simple_websocket import Client, ConnectionClosed
from werkzeug.serving import make_server


@pytest.fixture
def serve():
    """Run an app on a real threaded werkzeug server; yields a ws:// URL factory."""

    servers = []

    def start(app):
        server = make_server("127.0.0.1", 0, app, threaded=True)
        threading.Thread(target=server.serve_forever, name="test-server", daemon=True).start()
        servers.append(server)
        return f"ws://127.0.0.1:{server.server_port}/ws/desktop"

    yield start
    for server in servers:
        server.shutdown()
        server.server_close()


def test_identify_as_another_user_closes_with_4403(app_factory, bearer, serve):
    app, container = app_factory(auth_required=True)
    client = Client.connect(serve(app), headers=bearer(container, user_id=3, role=2))
    try:
        assert json.loads(client.receive(timeout=2))["type"] == "connected"

        client.send(json.dumps({"type": "identify", "userId": 7}))
        reply = json.loads(client.receive(timeout=2))
        with pytest.raises(ConnectionClosed) as closed:
            client.receive(timeout=2)
    finally:
        if client.connected:
            client.close()

    assert reply["type"] == "identified"
    assert reply["ok"] is False
    assert closed.value.reason == 4403


def test_client_answering_protocol_pings_survives_heartbeat(app_factory, serve):
    app, container = app_factory()
    client = Client.connect(serve(app))
    try:
        assert json.loads(client.receive(timeout=2))["type"] == "connected"

        # The client never sends a frame; only its automatic pongs keep it alive.
        for _ in range(3):
            assert container.hub.sweep() == 0
            time.sleep(0.3)

        assert client.connected
        assert container.hub.client_count == 1
    finally:
        if client.connected:
            client.close()
        container.hub.shutdown()
