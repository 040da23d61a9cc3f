from __future__ import annotations

from typing import Sequence

from ..database.mysql_base import db_cursor, fetchall
from .repository import LookupRepository


class MySQLLookupRepository(LookupRepository):
    def __init__(self, conn_factory):
        self._conn_factory = conn_factory

    def _query(self, sql: str) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql)
            return fetchall(cur)

    def project_types(self) -> Sequence[dict]:
        return self._query("SELECT id, code, label FROM ref_project_types ORDER BY label")

    def project_statuses(self) -> Sequence[dict]:
        return self._query("SELECT id, label FROM ref_project_status ORDER BY id")

    def customers(self) -> Sequence[dict]:
        return self._query("SELECT id, name FROM customers ORDER BY name")

    def item_types(self) -> Sequence[dict]:
        return self._query("SELECT id, name FROM ref_item_types ORDER BY name")

    def unit_types(self) -> Sequence[dict]:
        return self._query("SELECT id, name FROM ref_unit_types ORDER BY name")

    def users(self) -> Sequence[dict]:
        return self._query(
            "SELECT id, CONCAT(first_name, ' ', last_name) AS fullName FROM users ORDER BY fullName"
        )

    def project_roles(self) -> Sequence[dict]:
        return self._query("SELECT id, label FROM ref_project_roles ORDER BY label")

    def tasks(self) -> Sequence[dict]:
        return self._query(
            """
            SELECT t.id, t.description, t.category_id AS categoryId, c.name AS categoryName
            FROM tasks t
            LEFT JOIN ref_task_category c ON c.id = t.category_id
            ORDER BY t.id
            """
        )

    def task_categories(self) -> Sequence[dict]:
        return self._query("SELECT id, name FROM ref_task_category ORDER BY name")
