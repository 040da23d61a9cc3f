import threading

from src.worktrack.worktrack.health.lifecycle import Lifecycle


def test_lifecycle_drain():
    lifecycle = Lifecycle()
    lifecycle.request_started()
    lifecycle.request_started()

    assert not lifecycle.wait_for_drain(0.01)

    def finish():
        lifecycle.request_finished()
        lifecycle.request_finished()

    threading.Timer(0.05, finish).start()
    assert lifecycle.wait_for_drain(2)
    assert lifecycle.in_flight == 0


def test_uptime_uses_clock():
    now = [100.0]
    lifecycle = Lifecycle(clock=lambda: now[0])
    now[0] = 112.5
    assert lifecycle.uptime_seconds == 12.5


def test_live_and_ready(app_factory):
    app, container = app_factory()
    client = app.test_client()

    live = client.get("/health/live")
    assert live.status_code == 200
    assert live.get_json()["status"] == "ok"

    ready = client.get("/health/ready")
    assert ready.status_code == 200
    assert ready.get_json()["database"] == "ok"
    assert container.lifecycle.in_flight == 0


def test_not_ready_when_database_down(app_factory):
    app, container = app_factory()
    container.db.up = False

    resp = app.test_client().get("/health/ready")

    assert resp.status_code == 503
    assert resp.get_json()["status"] == "not_ready"
    assert resp.get_json()["database"] == "unavailable"


def test_shutting_down_is_live_but_not_ready(app_factory):
    app, container = app_factory()
    container.lifecycle.begin_shutdown()
    client = app.test_client()

    assert client.get("/health/live").get_json()["shuttingDown"] is True
    assert client.get("/health/ready").status_code == 503
