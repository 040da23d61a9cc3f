from __future__ import annotations

from dataclasses import replace
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.worktrack.worktrack.core.exceptions import AuthenticationError, ValidationError
from src.worktrack.worktrack.security.passwords import is_password_hash
from src.worktrack.worktrack.security.tokens import AuthSettings, TokenService
from src.worktrack.worktrack.users.model import User
from src.worktrack.worktrack.users.service import AuthService


class InMemoryUsers:
    def __init__(self, *users: User, fail_updates: bool = False):
        self.by_login = {u.login: u for u in users}
        self.fail_updates = fail_updates
        self.updates = []

    def get_by_login(self, login: str) -> Optional[User]:
        return self.by_login.get(login)

    def get_active_by_authcode(self, code: str) -> Optional[User]:
        return next((u for u in self.by_login.values() if u.authcode == code and u.is_active), None)

    def update_password(self, user_id: int, password_hash: str) -> bool:
        if self.fail_updates:
            raise RuntimeError("read-only replica")
        self.updates.append((user_id, password_hash))
        for login, user in self.by_login.items():
            if user.user_id == user_id:
                self.by_login[login] = replace(user, password=password_hash)
        return True


def make_service(users, *, required=True):
    return AuthService(users, TokenService(AuthSettings(required=required, secret="s", expires_in="8h")))


ADA = User(user_id=7, first_name="Ada", last_name="L", login="ada", password=generate_password_hash("pw"), role=2, authcode="A1")


def test_login_returns_token():
    result = make_service(InMemoryUsers(ADA)).login(" ada ", "pw").to_dict()

    assert result["id"] == 7
    assert result["system_role"] == 2
    assert result["tokenType"] == "Bearer"
    assert result["expiresIn"] == "8h"
    assert result["accessToken"]


def test_login_failures():
    service = make_service(InMemoryUsers(ADA, replace(ADA, user_id=8, login="gone", is_active=False)))
    with pytest.raises(ValidationError):
        service.login("", "pw")
    with pytest.raises(AuthenticationError):
        service.login("ada", "wrong")
    with pytest.raises(AuthenticationError):
        service.login("gone", "pw")
    with pytest.raises(AuthenticationError):
        service.login("nobody", "pw")


def test_legacy_password_is_rehashed_on_login():
    users = InMemoryUsers(replace(ADA, password="plain"))

    make_service(users).login("ada", "plain")

    assert users.updates and is_password_hash(users.updates[0][1])
    make_service(users).login("ada", "plain")
    assert len(users.updates) == 1


def test_failed_rehash_does_not_fail_login():
    users = InMemoryUsers(replace(ADA, password="plain"), fail_updates=True)

    assert make_service(users).login("ada", "plain").user.user_id == 7


def test_login_by_authcode():
    service = make_service(InMemoryUsers(ADA))

    assert service.login_by_authcode("A1").user.login == "ada"
    assert service.login_by_authcode("zzz") is None
    with pytest.raises(ValidationError):
        service.login_by_authcode("  ")


def test_without_secret_no_token_is_issued():
    service = AuthService(InMemoryUsers(ADA), TokenService(AuthSettings(required=False, secret="")))

    result = service.login("ada", "pw").to_dict()

    assert result["accessToken"] is None
    assert result["tokenType"] is None
