from __future__ import annotations

from contextlib import contextmanager

from src.worktrack.worktrack.core.enums import Role
from src.worktrack.worktrack.desktop.activity_service import ActivityService
from src.worktrack.worktrack.users.model import LoginResult, User


class RecordingActivities:
    def __init__(self):
        self.started = []

    def exists(self, uuid):
        return any(a.uuid == uuid for a in self.started)

    def insert_open(self, activity):
        self.started.append(activity)
        return True

    @contextmanager
    def completion(self, uuid):
        class Missing:
            record = None

            def abandon(self):
                pass

        yield Missing()


class StubAuth:
    def login_by_authcode(self, code):
        if code != "A1":
            return None
        user = User(user_id=7, first_name="Ada", last_name="L", login="ada", password="", role=2)
        return LoginResult(user=user, access_token="tkn", expires_in="8h")


def build(app_factory, **kwargs):
    repo = RecordingActivities()
    app, container = app_factory(
        services=lambda c: {"activity_service": ActivityService(repo), "auth_service": StubAuth()}, **kwargs
    )
    return app, container, repo


def test_login_authcode_is_public(app_factory):
    app, _, _ = build(app_factory, auth_required=True)
    client = app.test_client()

    assert client.post("/api/desktop/login-authcode", json={"code": "A1"}).get_json()["accessToken"] == "tkn"
    assert client.post("/api/desktop/login-authcode", json={"code": "??"}).get_json() is None


def test_activity_routes_are_idempotent(app_factory):
    app, _, repo = build(app_factory)
    client = app.test_client()
    body = {"uuid": "u-1", "userId": 7, "timestamp": "2026-03-02T09:00:00"}

    assert client.post("/api/desktop/activities/start-unallocated", json=body).get_json() == {"success": True}
    assert client.post("/api/desktop/activities/start-unallocated", json=body).get_json() == {
        "success": True,
        "duplicate": True,
    }
    assert client.post("/api/desktop/activities/complete", json={"uuid": "zz", "userId": 7}).get_json() == {
        "success": True,
        "ignored": True,
    }
    assert len(repo.started) == 1


def test_employee_cannot_start_for_someone_else(app_factory, bearer):
    app, container, repo = build(app_factory, auth_required=True)
    client = app.test_client()
    headers = bearer(container, user_id=7, role=Role.EMPLOYEE)

    resp = client.post(
        "/api/desktop/activities/start-task",
        json={"uuid": "u-2", "user_id": 99, "project_id": 10, "task_id": 3},
        headers=headers,
    )

    assert resp.status_code == 200
    assert repo.started[0].user_id == 7


def test_missing_fields_are_400(app_factory):
    app, _, _ = build(app_factory)

    resp = app.test_client().post("/api/desktop/activities/start-task", json={"uuid": "u-3", "userId": 7})

    assert resp.status_code == 400
    assert "required" in resp.get_json()["error"]
