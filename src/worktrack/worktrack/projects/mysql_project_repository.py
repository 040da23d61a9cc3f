from __future__ import annotations

from typing import Optional, Sequence

from ..database.capabilities import SchemaCapabilities
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone
from .model import Project, ProjectDraft, ProjectTask, TeamMember
from .repository import ProjectRepository


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory, capabilities: SchemaCapabilities):
        self._conn_factory = conn_factory
        self._capabilities = capabilities

    def list_all(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT p.id, p.name, p.type_code AS code,
                       pt.label AS project_type,
                       st.label AS project_status,
                       c.name AS customer_name,
                       p.created_at
                FROM projects p
                LEFT JOIN ref_project_types pt ON pt.code = p.type_code
                LEFT JOIN ref_project_status st ON st.id = p.project_status_id
                LEFT JOIN customers c ON c.id = p.customer_id
                ORDER BY p.created_at DESC
                """
            )
            return fetchall(cur)

    def get(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, type_code, item_id, unit_id, project_status_id, customer_id
                FROM projects
                WHERE id=%s
                """,
                (int(project_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Project(
                id=int(row["id"]),
                name=row["name"],
                type_code=row.get("type_code"),
                item_id=row.get("item_id"),
                unit_id=row.get("unit_id"),
                project_status_id=int(row.get("project_status_id") or 0),
                customer_id=row.get("customer_id"),
            )

    def get_team(self, project_id: int) -> Sequence[TeamMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, project_role_id FROM project_users WHERE project_id=%s",
                (int(project_id),),
            )
            return [TeamMember(int(r["user_id"]), int(r["project_role_id"])) for r in fetchall(cur)]

    def get_tasks(self, project_id: int) -> Sequence[ProjectTask]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ptr.task_id, ptr.role_id, t.description, t.category_id
                FROM project_task_roles ptr
                JOIN tasks t ON t.id = ptr.task_id
                WHERE ptr.project_id=%s
                ORDER BY ptr.id
                """,
                (int(project_id),),
            )
            rows = fetchall(cur)

        grouped: dict[int, dict] = {}
        for r in rows:
            entry = grouped.setdefault(
                int(r["task_id"]),
                {"title": r.get("description") or "", "category": r.get("category_id"), "roles": []},
            )
            entry["roles"].append(int(r["role_id"]))
        return [
            ProjectTask(task_id=task_id, task_title=e["title"], category_id=e["category"], role_ids=tuple(e["roles"]))
            for task_id, e in grouped.items()
        ]

    def create(self, draft: ProjectDraft) -> int:
        p = draft.project
        with db_transaction(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO projects(name, type_code, item_id, unit_id, project_status_id, customer_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (p.name, p.type_code, p.item_id, p.unit_id, p.project_status_id, p.customer_id),
            )
            project_id = int(cur.lastrowid)
            self._write_assignments(cur, project_id, draft)
            return project_id

    def update(self, project_id: int, draft: ProjectDraft) -> None:
        p = draft.project
        with db_transaction(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE projects
                SET name=%s, type_code=%s, item_id=%s, unit_id=%s, project_status_id=%s, customer_id=%s
                WHERE id=%s
                """,
                (p.name, p.type_code, p.item_id, p.unit_id, p.project_status_id, p.customer_id, int(project_id)),
            )
            cur.execute("DELETE FROM project_users WHERE project_id=%s", (int(project_id),))
            cur.execute("DELETE FROM project_task_roles WHERE project_id=%s", (int(project_id),))
            self._write_assignments(cur, project_id, draft)

    def _next_id(self, cur, table: str) -> Optional[int]:
        # Some deployments created these tables without AUTO_INCREMENT.
        if self._capabilities.is_auto_increment(table):
            return None
        cur.execute(f"SELECT COALESCE(MAX(id), 0) AS max_id FROM {table} FOR UPDATE")
        row = fetchone(cur) or {}
        return int(row.get("max_id") or 0) + 1

    def _write_assignments(self, cur, project_id: int, draft: ProjectDraft) -> None:
        next_id = self._next_id(cur, "project_users")
        for member in draft.team:
            if next_id is None:
                cur.execute(
                    "INSERT INTO project_users(project_id, user_id, project_role_id) VALUES(%s,%s,%s)",
                    (project_id, member.user_id, member.role_id),
                )
            else:
                cur.execute(
                    "INSERT INTO project_users(id, project_id, user_id, project_role_id) VALUES(%s,%s,%s,%s)",
                    (next_id, project_id, member.user_id, member.role_id),
                )
                next_id += 1

        next_id = self._next_id(cur, "project_task_roles")
        for task in draft.tasks:
            task_id = task.task_id
            if not task_id and task.task_title:
                cur.execute(
                    "INSERT INTO tasks(description, category_id) VALUES(%s,%s)",
                    (task.task_title, task.category_id),
                )
                task_id = int(cur.lastrowid)
            if not task_id:
                continue
            for role_id in task.role_ids:
                if next_id is None:
                    cur.execute(
                        "INSERT INTO project_task_roles(project_id, task_id, role_id) VALUES(%s,%s,%s)",
                        (project_id, task_id, role_id),
                    )
                else:
                    cur.execute(
                        "INSERT INTO project_task_roles(id, project_id, task_id, role_id) VALUES(%s,%s,%s,%s)",
                        (next_id, project_id, task_id, role_id),
                    )
                    next_id += 1
