from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from .tokens import Principal, TokenService


def extract_bearer_token(header: Optional[str]) -> Optional[str]:
    parts = str(header or "").strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        return None
    return parts[1].strip()


def current_principal() -> Optional[Principal]:
    return g.get("principal")


class AuthGuard:
    """Request guards for the optional bearer-token mode.

    With auth disabled every guard lets the request through and
    ``current_principal()`` stays ``None``.
    """

    def __init__(self, tokens: TokenService):
        self._tokens = tokens

    @property
    def enabled(self) -> bool:
        return self._tokens.auth_required

    def authenticate(self, authorization: Optional[str]) -> Optional[Principal]:
        if not self.enabled:
            return None
        token = extract_bearer_token(authorization)
        if not token:
            raise AuthenticationError("Missing bearer token")
        return self._tokens.verify(token)

    def load_principal(self) -> Optional[Principal]:
        principal = self.authenticate(request.headers.get("Authorization"))
        g.principal = principal
        return principal

    def require_auth(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            self.load_principal()
            return view(*args, **kwargs)

        return wrapper

    def require_role(self, *roles: Role | int):
        allowed = {int(r) for r in roles}

        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                principal = self.load_principal()
                if self.enabled and (principal is None or int(principal.role) not in allowed):
                    raise AuthorizationError("Forbidden")
                return view(*args, **kwargs)

            return wrapper

        return decorator


def resolve_scoped_user_id(principal: Optional[Principal], requested_user_id: int) -> int:
    """Admins may act for any user; everyone else is pinned to themselves.

    Without a principal (auth disabled) the requested id is used as-is.
    """

    if principal is None:
        return requested_user_id
    if int(principal.role) == Role.ADMIN:
        return requested_user_id or principal.user_id
    return principal.user_id
