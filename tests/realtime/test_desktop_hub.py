import json
import threading
import time

from src.worktrack.worktrack.events.bus import ChangeEvent
from src.worktrack.worktrack.realtime.hub import DesktopHub


class FakeConnection:
    def __init__(self, *, answers_pings=False):
        self.is_open = True
        self.sent = []
        self.closed_with = None
        self.terminated = False
        self.answers_pings = answers_pings
        self.pings = 0
        self._pong = False

    def send(self, text):
        if not self.is_open:
            raise ConnectionError("closed")
        self.sent.append(json.loads(text))

    def ping(self):
        self.pings += 1
        if self.answers_pings:
            self._pong = True

    def take_pong(self):
        pong, self._pong = self._pong, False
        return pong

    def close(self, code=1000, reason=""):
        self.closed_with = (code, reason)
        self.is_open = False

    def terminate(self):
        self.terminated = True
        self.is_open = False

    def types(self):
        return [m["type"] for m in self.sent]


class StalledConnection(FakeConnection):
    """A peer that stopped reading: send blocks until the socket is torn down."""

    def __init__(self):
        super().__init__()
        self.released = threading.Event()

    def send(self, text):
        self.released.wait(5)
        raise ConnectionError("reset")

    def terminate(self):
        super().terminate()
        self.released.set()


def make_hub(*, auth_required=False, outbox_capacity=64):
    return DesktopHub(
        name_resolver=lambda user_id: {7: "Ada Lovelace"}.get(user_id, f"User #{user_id}"),
        auth_required=auth_required,
        endpoint="/ws/desktop",
        outbox_capacity=outbox_capacity,
        clock=lambda: 1700000000.0,
    )


def test_open_sends_connected_message():
    hub = make_hub()
    conn = FakeConnection()

    hub.open(conn, remote="10.0.0.5")

    assert hub.flush()
    assert conn.sent == [{"type": "connected", "endpoint": "/ws/desktop", "ts": 1700000000000}]
    assert hub.client_count == 1


def test_ping_subscribe_and_garbage():
    hub = make_hub()
    conn = FakeConnection()
    session = hub.open(conn)

    hub.handle_message(session, '{"type": "ping"}')
    hub.handle_message(session, b'{"type": "subscribe"}')
    hub.handle_message(session, "not json")
    hub.handle_message(session, "[1, 2]")
    hub.handle_message(session, '{"type": "unknown"}')

    assert hub.flush()
    assert conn.types() == ["connected", "pong", "subscribed"]
    assert conn.sent[2]["ok"] is True


def test_identify_sets_user():
    hub = make_hub()
    conn = FakeConnection()
    session = hub.open(conn)

    hub.handle_message(session, json.dumps({"type": "identify", "userId": 7}))

    assert hub.flush()
    assert session.user_id == 7
    assert session.label == "Ada Lovelace"
    assert conn.sent[-1]["type"] == "identified"
    assert conn.sent[-1]["ok"] is True
    assert conn.sent[-1]["userId"] == 7


def test_identify_without_user_id_is_ignored():
    hub = make_hub()
    conn = FakeConnection()
    session = hub.open(conn)

    hub.handle_message(session, json.dumps({"type": "identify"}))

    assert hub.flush()
    assert session.user_id is None
    assert conn.types() == ["connected"]


def test_identify_as_other_user_is_refused_when_auth_required():
    hub = make_hub(auth_required=True)
    conn = FakeConnection()
    session = hub.open(conn, auth_user_id=3)

    hub.handle_message(session, json.dumps({"type": "identify", "userId": 7}))

    assert hub.flush()
    assert conn.sent[-1]["type"] == "identified"
    assert conn.sent[-1]["ok"] is False
    assert conn.sent[-1]["error"] == "Forbidden"
    assert conn.closed_with == (4403, "Forbidden")
    assert session.user_id is None


def test_identify_as_self_is_accepted_when_auth_required():
    hub = make_hub(auth_required=True)
    conn = FakeConnection()
    session = hub.open(conn, auth_user_id=7)

    hub.handle_message(session, json.dumps({"type": "identify", "userId": "7"}))

    assert hub.flush()
    assert session.user_id == 7
    assert conn.closed_with is None


def test_broadcast_reaches_open_clients_only():
    hub = make_hub()
    a, b, c = FakeConnection(), FakeConnection(), FakeConnection()
    for conn in (a, b, c):
        hub.open(conn)
    assert hub.flush()
    c.is_open = False

    delivered = hub.broadcast(ChangeEvent(reason="transaction-commit", ts=42))

    assert hub.flush()
    assert delivered == 2
    assert a.sent[-1] == {"type": "db-changed", "reason": "transaction-commit", "ts": 42}
    assert b.sent[-1] == a.sent[-1]
    assert c.types() == ["connected"]


def test_broadcast_without_clients_is_noop():
    assert make_hub().broadcast({"type": "db-changed"}) == 0


def test_silent_client_is_dropped_on_second_sweep():
    hub = make_hub()
    chatty, silent = FakeConnection(), FakeConnection()
    chatty_session = hub.open(chatty)
    hub.open(silent)

    assert hub.sweep() == 0
    assert hub.flush()
    assert silent.pings == 1

    hub.handle_message(chatty_session, json.dumps({"type": "pong"}))

    assert hub.sweep() == 1
    assert silent.terminated
    assert not chatty.terminated
    assert hub.client_count == 1


def test_client_answering_protocol_pings_stays_connected():
    hub = make_hub()
    conn = FakeConnection(answers_pings=True)
    hub.open(conn)

    for _ in range(3):
        assert hub.sweep() == 0
        assert hub.flush()

    assert conn.pings == 3
    assert not conn.terminated
    assert hub.client_count == 1
    assert "ping" not in conn.types()


def test_stalled_client_does_not_hold_up_others():
    hub = make_hub(outbox_capacity=4)
    stalled, healthy = StalledConnection(), FakeConnection()
    hub.open(stalled)
    healthy_session = hub.open(healthy)

    started = time.monotonic()
    accepted = []
    for n in range(10):
        accepted.append(hub.broadcast({"type": "db-changed", "n": n}))
        assert healthy_session.outbox.drain(1)
    assert hub.sweep() == 0

    assert time.monotonic() - started < 2
    assert accepted[-1] == 1
    assert [m["n"] for m in healthy.sent[1:]] == list(range(10))

    hub.handle_message(healthy_session, json.dumps({"type": "subscribe"}))

    assert hub.sweep() == 1
    assert stalled.terminated
    assert hub.client_count == 1
    assert not healthy.terminated


def test_close_is_idempotent_and_shutdown_closes_everyone():
    hub = make_hub()
    a, b = FakeConnection(), FakeConnection()
    session = hub.open(a)
    hub.open(b)

    hub.close(session)
    hub.close(session)
    assert hub.client_count == 1

    hub.shutdown()

    assert b.closed_with == (1001, "Server shutting down")
    assert hub.client_count == 0
