from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import normalize_string
from ..core.exceptions import AuthenticationError, ValidationError
from ..database.capabilities import OptionalTables
from ..security.passwords import hash_password, needs_rehash, verify_password
from ..security.tokens import TokenService
from .model import LoginResult, User
from .repository import UserRepository

log = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate a user (password login or desktop auth code)."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self._users = users
        self._tokens = tokens

    def _issue(self, user: User) -> LoginResult:
        token = self._tokens.sign(user_id=user.user_id, role=user.role, login=user.login)
        return LoginResult(user=user, access_token=token, expires_in=self._tokens.expires_in)

    def login(self, username: str, password: str) -> LoginResult:
        username = normalize_string(username)
        if not username or not password:
            raise ValidationError("Username and password are required")

        user = self._users.get_by_login(username)
        if not user or not user.is_active or not verify_password(password, user.password):
            raise AuthenticationError("Invalid username or password")

        if needs_rehash(user.password):
            try:
                self._users.update_password(user.user_id, hash_password(password))
            except Exception as exc:
                # Login must not fail because the upgrade did.
                log.warning("Password hash migration failed for user %s: %s", user.user_id, exc)

        return self._issue(user)

    def login_by_authcode(self, code: str) -> Optional[LoginResult]:
        code = normalize_string(code)
        if not code:
            raise ValidationError("code is required")
        user = self._users.get_active_by_authcode(code)
        if not user:
            return None
        return self._issue(user)


class UserService:
    def __init__(self, users: UserRepository, optional: OptionalTables):
        self._users = users
        self._optional = optional

    def list_users(self) -> Sequence[dict]:
        if not self._optional.available("users"):
            return []
        return self._users.list_all()

    def display_name(self, user_id: int) -> str:
        fallback = f"User #{user_id}"
        try:
            return self._users.get_display_name(user_id) or fallback
        except Exception as exc:
            log.warning("Failed to resolve user name for %s: %s", user_id, exc)
            return fallback
