from __future__ import annotations

from typing import Sequence

from ..core.exceptions import NotFoundError, ValidationError
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone
from .model import CreatedItem, ItemBatchRequest, item_code, item_label
from .repository import ItemRepository


class MySQLItemRepository(ItemRepository):
    def __init__(self, conn_factory):
        self._conn_factory = conn_factory

    def list_by_project(self, project_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT i.id, i.code, i.label,
                       i.project_id AS projectId,
                       i.item_category_id AS categoryId,
                       i.created_at AS createdAt,
                       i.updated_at AS updatedAt,
                       s.label AS statusLabel
                FROM items i
                LEFT JOIN ref_item_status s ON s.id = i.status_id
                WHERE i.project_id=%s
                ORDER BY i.id
                """,
                (int(project_id),),
            )
            return fetchall(cur)

    def create_batch(self, request: ItemBatchRequest) -> Sequence[CreatedItem]:
        with db_transaction(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT item_id, unit_id FROM projects WHERE id=%s",
                (request.project_id,),
            )
            project = fetchone(cur)
            if not project:
                raise NotFoundError("Project not found")
            item_type_id = project.get("item_id")
            unit_type_id = project.get("unit_id")
            if not item_type_id:
                raise ValidationError("Project is missing item type.")

            cur.execute("SELECT name FROM ref_item_types WHERE id=%s", (item_type_id,))
            type_row = fetchone(cur) or {}
            item_type_name = str(type_row.get("name") or "NA").strip()

            category_label = "NA"
            if request.category_id:
                cur.execute("SELECT label FROM ref_item_category WHERE id=%s", (request.category_id,))
                category_row = fetchone(cur) or {}
                category_label = str(category_row.get("label") or "NA").strip()

            cur.execute("SELECT COUNT(*) AS cnt FROM items WHERE project_id=%s", (request.project_id,))
            project_sequence = int((fetchone(cur) or {}).get("cnt") or 0) + 1

            cur.execute(
                """
                SELECT COUNT(*) AS cnt
                FROM items
                WHERE project_id=%s AND item_category_id <=> %s
                """,
                (request.project_id, request.category_id),
            )
            category_sequence = int((fetchone(cur) or {}).get("cnt") or 0) + 1

            created: list[CreatedItem] = []
            for _ in range(request.count):
                cur.execute(
                    """
                    INSERT INTO items(code, label, project_id, item_type_id, item_category_id,
                                      unit_type_id, status_id, created_by_user_id, created_at)
                    VALUES(%s,%s,%s,%s,%s,%s,NULL,%s,NOW())
                    """,
                    (
                        "",
                        item_label(category_label, item_type_name, category_sequence),
                        request.project_id,
                        item_type_id,
                        request.category_id,
                        unit_type_id,
                        request.user_id,
                    ),
                )
                item_id = int(cur.lastrowid)
                code = item_code(category_label, request.project_id, item_id, project_sequence, category_sequence)
                cur.execute("UPDATE items SET code=%s WHERE id=%s", (code, item_id))
                created.append(CreatedItem(item_id, code))
                project_sequence += 1
                category_sequence += 1
            return created
