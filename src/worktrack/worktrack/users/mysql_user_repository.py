from __future__ import annotations

from typing import Optional, Sequence

from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "id, first_name, last_name, login, password, authcode, system_role, is_active"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["id"]),
        first_name=row.get("first_name") or "",
        last_name=row.get("last_name") or "",
        login=row.get("login") or "",
        password=row.get("password") or "",
        role=int(row.get("system_role") or 0),
        is_active=bool(row.get("is_active", True)),
        authcode=row.get("authcode"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory):
        self._conn_factory = conn_factory

    def get_by_login(self, login: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE login=%s LIMIT 1", (login,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_active_by_authcode(self, code: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE authcode=%s AND is_active=1 LIMIT 1",
                (code,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def update_password(self, user_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password=%s WHERE id=%s", (password_hash, int(user_id)))
            return cur.rowcount > 0

    def get_display_name(self, user_id: int) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT CONCAT(TRIM(first_name), ' ', TRIM(last_name)) AS full_name
                FROM users
                WHERE id=%s
                LIMIT 1
                """,
                (int(user_id),),
            )
            row = fetchone(cur)
            name = str((row or {}).get("full_name") or "").strip()
            return name or None

    def list_all(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, first_name, last_name, login, system_role, is_active
                FROM users
                ORDER BY id
                """
            )
            return fetchall(cur)
