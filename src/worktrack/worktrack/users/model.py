from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class User:
    """A row of `users`.

    ``password`` is a werkzeug hash, or clear text for legacy rows that have
    not logged in since hashing was introduced.
    """

    user_id: int
    first_name: str
    last_name: str
    login: str
    password: str
    role: int
    is_active: bool = True
    authcode: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{(self.first_name or '').strip()} {(self.last_name or '').strip()}".strip()


@dataclass(frozen=True)
class LoginResult:
    user: User
    access_token: Optional[str]
    expires_in: Optional[str]

    def to_dict(self) -> dict:
        return {
            "id": self.user.user_id,
            "first_name": self.user.first_name,
            "last_name": self.user.last_name,
            "login": self.user.login,
            "role": self.user.role,
            "system_role": self.user.role,
            "accessToken": self.access_token,
            "tokenType": "Bearer" if self.access_token else None,
            "expiresIn": self.expires_in if self.access_token else None,
        }
