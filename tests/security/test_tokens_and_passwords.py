from datetime import datetime, timedelta, timezone

import pytest

from src.worktrack.worktrack.core.enums import Role
from src.worktrack.worktrack.core.exceptions import AuthenticationError
from src.worktrack.worktrack.security.guards import extract_bearer_token, resolve_scoped_user_id
from src.worktrack.worktrack.security.passwords import hash_password, needs_rehash, verify_password
from src.worktrack.worktrack.security.tokens import AuthSettings, Principal, TokenService, parse_expires_in


def test_parse_expires_in():
    assert parse_expires_in("8h") == timedelta(hours=8)
    assert parse_expires_in("30m") == timedelta(minutes=30)
    assert parse_expires_in(3600) == timedelta(hours=1)
    with pytest.raises(ValueError):
        parse_expires_in("soon")


def test_sign_and_verify_round_trip():
    tokens = TokenService(AuthSettings(required=True, secret="s3cret", expires_in="1h"))

    principal = tokens.verify(tokens.sign(user_id=7, role=Role.EMPLOYEE, login="ada"))

    assert principal == Principal(user_id=7, role=2, login="ada")


def test_expired_and_tampered_tokens_are_rejected():
    tokens = TokenService(AuthSettings(required=True, secret="s3cret", expires_in="1m"))
    old = tokens.sign(user_id=7, role=2, login="ada", now=datetime.now(tz=timezone.utc) - timedelta(hours=1))
    with pytest.raises(AuthenticationError):
        tokens.verify(old)

    other = TokenService(AuthSettings(required=True, secret="different"))
    with pytest.raises(AuthenticationError):
        tokens.verify(other.sign(user_id=7, role=2, login="ada"))


def test_secret_is_mandatory_when_auth_required():
    with pytest.raises(ValueError):
        TokenService(AuthSettings(required=True, secret=""))
    assert TokenService(AuthSettings(required=False, secret="")).sign(user_id=1, role=1, login="x") is None


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc") == "abc"
    assert extract_bearer_token("bearer   abc ") == "abc"
    assert extract_bearer_token("Basic abc") is None
    assert extract_bearer_token(None) is None


def test_scoped_user_id():
    admin = Principal(user_id=1, role=Role.ADMIN, login="boss")
    employee = Principal(user_id=7, role=Role.EMPLOYEE, login="ada")

    assert resolve_scoped_user_id(None, 42) == 42
    assert resolve_scoped_user_id(admin, 42) == 42
    assert resolve_scoped_user_id(admin, 0) == 1
    assert resolve_scoped_user_id(employee, 42) == 7


def test_passwords_hashed_and_legacy():
    stored = hash_password("pw")
    assert verify_password("pw", stored)
    assert not verify_password("nope", stored)
    assert not needs_rehash(stored)

    assert verify_password("legacy", "legacy")
    assert needs_rehash("legacy")
    assert not verify_password("", "legacy")
