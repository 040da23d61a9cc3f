from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from ..core.constants import DEFAULT_JWT_EXPIRES_IN
from ..core.exceptions import AuthenticationError

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_expires_in(value: str | int | None) -> timedelta:
    """Parse ``8h`` / ``30m`` / ``3600`` style durations."""

    match = _DURATION_RE.match(str(value if value is not None else DEFAULT_JWT_EXPIRES_IN))
    if not match:
        raise ValueError(f"Invalid token lifetime: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNIT_SECONDS[unit.lower()])


@dataclass(frozen=True)
class AuthSettings:
    required: bool
    secret: str
    expires_in: str = DEFAULT_JWT_EXPIRES_IN


@dataclass(frozen=True)
class Principal:
    user_id: int
    role: int
    login: str


class TokenService:
    algorithm = "HS256"

    def __init__(self, settings: AuthSettings):
        if settings.required and not settings.secret:
            raise ValueError("JWT_SECRET is required when AUTH_REQUIRED=true")
        self._settings = settings
        self._lifetime = parse_expires_in(settings.expires_in)

    @property
    def auth_required(self) -> bool:
        return self._settings.required

    @property
    def expires_in(self) -> str:
        return self._settings.expires_in

    def sign(self, *, user_id: int, role: int, login: str, now: Optional[datetime] = None) -> Optional[str]:
        if not self._settings.secret:
            return None
        issued = now or datetime.now(tz=timezone.utc)
        payload: dict[str, Any] = {
            "sub": str(int(user_id)),
            "role": int(role or 0),
            "login": str(login or ""),
            "iat": issued,
            "exp": issued + self._lifetime,
        }
        return jwt.encode(payload, self._settings.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Principal:
        if not self._settings.secret:
            raise AuthenticationError("Invalid token")
        try:
            claims = jwt.decode(token, self._settings.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as exc:
            raise AuthenticationError("Invalid or expired token") from exc

        try:
            user_id = int(claims.get("sub") or 0)
        except (TypeError, ValueError):
            user_id = 0
        if user_id <= 0:
            raise AuthenticationError("Invalid token")

        return Principal(user_id=user_id, role=int(claims.get("role") or 0), login=str(claims.get("login") or ""))
