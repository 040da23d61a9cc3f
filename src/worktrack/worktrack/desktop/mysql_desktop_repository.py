from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.constants import PRODUCTION_ACTIVITY_ID
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .repository import DesktopRepository
from .task_data import VALUE_COLUMNS

_BOOTSTRAP_QUERIES = {
    "users": "SELECT id, first_name, last_name, login, system_role, is_active FROM users WHERE is_active = 1",
    "projects": "SELECT * FROM projects",
    "projectUsers": """
        SELECT pu.id, pu.project_id, pu.user_id, pu.project_role_id
        FROM project_users pu
        INNER JOIN projects p ON p.id = pu.project_id
        WHERE p.project_status_id = %(active_status_id)s
    """,
    "projectRoles": "SELECT * FROM ref_project_roles",
    "tasks": "SELECT * FROM tasks",
    "customers": "SELECT id, name FROM customers ORDER BY name",
    "itemTypes": "SELECT id, name FROM ref_item_types ORDER BY name",
    "projectTasks": "SELECT * FROM project_tasks",
    "projectTaskRoles": "SELECT * FROM project_task_roles",
    "taskDataDefinitions": "SELECT id, `key`, label, value_type FROM task_data_definitions",
    "projectTaskData": "SELECT * FROM project_task_data",
    "refItemStatus": "SELECT id, label AS name, label FROM ref_item_status",
    "cfsItems": "SELECT id, project_id, label, task_status_id FROM cfs_items",
    "imItems": "SELECT id, project_id, label, task_status_id FROM im_items",
}

_LEGACY_ITEM_TABLES = frozenset({"cfs_items", "im_items"})


class MySQLDesktopRepository(DesktopRepository):
    def __init__(self, conn_factory):
        self._conn_factory = conn_factory

    def bootstrap_dataset(self, name: str, *, active_status_id: int) -> Sequence[dict]:
        sql = _BOOTSTRAP_QUERIES[name]
        with db_cursor(self._conn_factory) as (_, cur):
            if "%(" in sql:
                cur.execute(sql, {"active_status_id": active_status_id})
            else:
                cur.execute(sql)
            return fetchall(cur)

    def project_task_data(self, project_id: int, task_id: int, *, with_required: bool) -> Sequence[dict]:
        required = "ptd.is_required AS isRequired" if with_required else "0 AS isRequired"
        values = ", ".join(f"ptd.{c}" for c in VALUE_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ptd.id,
                       ptd.project_task_id AS projectTaskId,
                       ptd.data_def_id AS dataDefId,
                       tdd.label AS definitionLabel,
                       tdd.value_type AS valueType,
                       {required},
                       {values}
                FROM project_task_data ptd
                JOIN project_tasks pt ON pt.id = ptd.project_task_id
                JOIN task_data_definitions tdd ON tdd.id = ptd.data_def_id
                WHERE pt.project_id=%s AND pt.task_id=%s
                ORDER BY ptd.id
                """,
                (project_id, task_id),
            )
            return fetchall(cur)

    def find_project_task_id(self, project_id: int, task_id: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM project_tasks WHERE project_id=%s AND task_id=%s LIMIT 1",
                (project_id, task_id),
            )
            row = fetchone(cur)
            return int(row["id"]) if row else None

    def save_project_task_data(self, project_task_id: int, data_def_id: int, column: str, value: Any) -> bool:
        if column not in VALUE_COLUMNS:
            raise ValueError(f"Unknown value column: {column}")
        cleared = ", ".join(f"{c}=NULL" for c in VALUE_COLUMNS if c != column)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM project_task_data WHERE project_task_id=%s AND data_def_id=%s LIMIT 1",
                (project_task_id, data_def_id),
            )
            existing = fetchone(cur)
            if existing:
                cur.execute(
                    f"UPDATE project_task_data SET {cleared}, {column}=%s, updated_at=NOW() WHERE id=%s",
                    (value, existing["id"]),
                )
                return True
            cur.execute(
                f"""
                INSERT INTO project_task_data(project_task_id, data_def_id, {column}, created_at, updated_at)
                VALUES(%s,%s,%s,NOW(),NOW())
                """,
                (project_task_id, data_def_id, value),
            )
            return False

    def available_tasks(self, user_id: int, project_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT t.id, t.description, 0 AS is_default, ptr.role_id AS roleId
                FROM project_users pu
                JOIN project_task_roles ptr
                  ON ptr.project_id = pu.project_id AND ptr.role_id = pu.project_role_id
                JOIN tasks t ON t.id = ptr.task_id
                WHERE pu.user_id=%s AND pu.project_id=%s
                """,
                (user_id, project_id),
            )
            return fetchall(cur)

    def project_items(self, project_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT i.id, i.label AS name, s.label AS status_label
                FROM items i
                LEFT JOIN ref_item_status s ON s.id = i.status_id
                WHERE i.project_id=%s
                ORDER BY i.id
                """,
                (project_id,),
            )
            return fetchall(cur)

    def legacy_project_items(self, table: str, project_id: int) -> Sequence[dict]:
        if table not in _LEGACY_ITEM_TABLES:
            raise ValueError(f"Unknown item table: {table}")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, label AS name FROM {table} WHERE project_id=%s", (project_id,))
            return fetchall(cur)

    def item_tracking_tasks(self, project_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT ist.task_id
                FROM itemstatus_task ist
                INNER JOIN ref_item_status ris ON ris.id = ist.item_status_id
                WHERE ris.project_id=%s
                ORDER BY ist.task_id
                """,
                (project_id,),
            )
            return [int(r["task_id"]) for r in fetchall(cur)]

    def item_status_rule(self, project_id: int, task_id: int, apply_after_finish: Optional[int]) -> Optional[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ist.item_status_id AS statusId, ist.apply_after_finish AS applyAfterFinish
                FROM itemstatus_task ist
                INNER JOIN ref_item_status ris ON ris.id = ist.item_status_id
                WHERE ris.project_id=%s
                  AND ist.task_id=%s
                  AND (%s IS NULL OR ist.apply_after_finish=%s)
                LIMIT 1
                """,
                (project_id, task_id, apply_after_finish, apply_after_finish),
            )
            return fetchone(cur)

    def set_item_status(self, item_id: int, status_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE items SET status_id=%s WHERE id=%s", (status_id, item_id))

    def unfinished_tasks(self, user_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT utt.id, utt.uuid,
                       utt.task_id AS taskId,
                       utt.item_id AS itemId,
                       utt.project_id AS projectId,
                       p.name AS projectName,
                       t.description AS taskName,
                       i.label AS itemName
                FROM users_time_tracking utt
                LEFT JOIN projects p ON p.id = utt.project_id
                LEFT JOIN tasks t ON t.id = utt.task_id
                LEFT JOIN items i ON i.id = utt.item_id
                WHERE utt.user_id=%s AND utt.activity_id=%s AND utt.is_finished = 0
                ORDER BY utt.start_time DESC
                """,
                (user_id, PRODUCTION_ACTIVITY_ID),
            )
            return fetchall(cur)

    def pending_assignments(self, user_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.id,
                       a.project_id AS projectId,
                       a.task_id AS taskId,
                       a.item_id AS itemId,
                       a.is_accepted AS isAccepted,
                       p.name AS projectName,
                       t.description AS taskName,
                       i.label AS itemName
                FROM assigments a
                LEFT JOIN projects p ON p.id = a.project_id
                LEFT JOIN tasks t ON t.id = a.task_id
                LEFT JOIN items i ON i.id = a.item_id
                WHERE a.user_id=%s AND (a.is_accepted = 0 OR a.is_accepted IS NULL)
                ORDER BY a.id DESC
                """,
                (user_id,),
            )
            return fetchall(cur)

    def accept_assignment(self, assignment_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE assigments SET is_accepted = 1 WHERE id=%s", (assignment_id,))

    def mark_finished(self, *, uuid: str = "", record_id: int = 0) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            if uuid:
                cur.execute("UPDATE users_time_tracking SET is_finished = 1 WHERE uuid=%s", (uuid,))
            else:
                cur.execute("UPDATE users_time_tracking SET is_finished = 1 WHERE id=%s", (record_id,))
