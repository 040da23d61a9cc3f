import json as jsonlib

import pytest

from src.worktrack.worktrack.client.api import BackendApi, BackendError


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.ok = status_code < 400
        self.content = b"" if body is None else jsonlib.dumps(body).encode()
        self.text = self.content.decode()
        self._body = body

    def json(self):
        return self._body


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, *, params=None, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json, "headers": headers})
        return self.responses.pop(0)


def test_login_stores_token_and_bootstrap_is_cached():
    session = FakeSession(
        FakeResponse(body={"id": 7, "accessToken": "tkn"}),
        FakeResponse(body={"projects": [{"id": 1}]}),
    )
    api = BackendApi("http://server:3000/api/", session=session)

    api.login_by_authcode("A1")
    assert api.dataset("projects") == [{"id": 1}]
    assert api.dataset("tasks") == []

    assert len(session.calls) == 2
    assert session.calls[0]["url"] == "http://server:3000/api/desktop/login-authcode"
    assert session.calls[1]["headers"]["Authorization"] == "Bearer tkn"


def test_unauthorized_clears_token_and_cache():
    session = FakeSession(FakeResponse(body={}), FakeResponse(401, {"error": "Invalid or expired token"}))
    api = BackendApi("http://server/api", session=session)
    api.set_access_token("old")
    api.bootstrap()

    with pytest.raises(BackendError) as exc:
        api.unfinished_tasks(7)

    assert exc.value.status_code == 401
    assert api.access_token is None
    assert session.calls[1]["params"] == {"userId": 7}


def test_base_url_from_environment(monkeypatch):
    monkeypatch.setenv("BACKEND_BASE_URL", "https://tt.example.com/api")
    assert BackendApi(session=FakeSession()).base_url == "https://tt.example.com/api"


def test_mark_unfinished_prefers_uuid():
    session = FakeSession(FakeResponse(body={"success": True}), FakeResponse(body={"success": True}))
    api = BackendApi("http://server/api", session=session)

    api.mark_unfinished_finished(uuid="u-1", record_id=4)
    api.mark_unfinished_finished(record_id=4)

    assert session.calls[0]["json"] == {"uuid": "u-1"}
    assert session.calls[1]["json"] == {"recordId": 4}
