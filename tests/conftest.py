from __future__ import annotations

from dataclasses import replace

import pytest

from src.worktrack.worktrack.container import build_container
from src.worktrack.worktrack.database.capabilities import SchemaSnapshot
from src.worktrack.worktrack.database.connection import DBConfig
from src.worktrack.worktrack.main import create_app
from src.worktrack.worktrack.settings import AppSettings

ALL_TABLES = (
    "users",
    "customers",
    "projects",
    "items",
    "ref_item_types",
    "ref_item_status",
    "task_data_definitions",
    "project_task_data",
    "itemstatus_task",
    "users_time_tracking",
)


class ImmediateTimer:
    """threading.Timer stand-in that fires on start()."""

    def __init__(self, interval, fn):
        self.interval = interval
        self.fn = fn
        self.daemon = False
        self.cancelled = False

    def start(self):
        if not self.cancelled:
            self.fn()

    def cancel(self):
        self.cancelled = True


class ProbeCursor:
    def __init__(self, db):
        self._db = db

    def execute(self, sql, params=None):
        if not self._db.up:
            raise OSError("database unavailable")
        self._db.executed.append(sql)

    def fetchall(self):
        return [(1,)]

    def close(self):
        pass


class ProbeConnection:
    def __init__(self, db):
        self._db = db

    def cursor(self, *args, **kwargs):
        return ProbeCursor(self._db)

    def close(self):
        pass


class ProbeDatabase:
    """Only answers ``SELECT 1``; HTTP tests replace every service touching SQL."""

    def __init__(self, up: bool = True):
        self.up = up
        self.executed: list[str] = []
        self.closed = False

    def connect(self):
        return ProbeConnection(self)

    def close(self):
        self.closed = True


def make_settings(**overrides) -> AppSettings:
    values = dict(
        secret_key="test-secret",
        db=DBConfig(host="localhost", port=3306, user="root", password="", database="worktrack_test"),
        testing=True,
        auth_required=False,
        jwt_secret="test-jwt-secret",
        debounce_ms=10,
        shutdown_grace_seconds=0.2,
        log_level="WARNING",
    )
    values.update(overrides)
    return AppSettings(**values)


def make_container(*, tables=ALL_TABLES, database=None, **settings_overrides):
    snapshot = SchemaSnapshot(columns={t: {"id": "auto_increment"} for t in tables})
    return build_container(
        settings=make_settings(**settings_overrides),
        database=database if database is not None else ProbeDatabase(),
        timer_factory=ImmediateTimer,
        capabilities_loader=lambda: snapshot,
    )


@pytest.fixture
def app_factory():
    """Build ``(app, container)``.

    ``services(container)`` returns container fields to replace, typically
    services wired to in-memory repositories.
    """

    def build(*, auth_required: bool = False, tables=ALL_TABLES, database=None, services=None):
        container = make_container(tables=tables, database=database, auth_required=auth_required)
        if services is not None:
            container = replace(container, **services(container))
        return create_app(container=container), container

    return build


@pytest.fixture
def bearer():
    """Authorization header for a token signed by the container under test."""

    def headers(container, *, user_id: int, role: int, login: str = "someone") -> dict:
        token = container.tokens.sign(user_id=user_id, role=role, login=login)
        return {"Authorization": f"Bearer {token}"}

    return headers
