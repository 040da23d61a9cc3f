from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import User


class UserRepository(Protocol):
    def get_by_login(self, login: str) -> Optional[User]:
        raise NotImplementedError

    def get_active_by_authcode(self, code: str) -> Optional[User]:
        raise NotImplementedError

    def update_password(self, user_id: int, password_hash: str) -> bool:
        raise NotImplementedError

    def get_display_name(self, user_id: int) -> Optional[str]:
        raise NotImplementedError

    def list_all(self) -> Sequence[dict]:
        raise NotImplementedError
