from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import METRICS_TASK_IDS, PAGES_DATA_DEF_ID, PRODUCTION_ACTIVITY_ID
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ManualEntry, TrackingQuery
from .repository import TimeTrackingRepository

# Duration falls back to the start/end difference for rows that were never closed
# through the activity lifecycle.
_DURATION = "COALESCE(utt.duration, TIMESTAMPDIFF(MINUTE, utt.start_time, utt.end_time))"
_PAGES = "COALESCE(utd.value_int, utd.value_decimal)"


class MySQLTimeTrackingRepository(TimeTrackingRepository):
    def __init__(self, conn_factory):
        self._conn_factory = conn_factory

    def list_entries(self, query: TrackingQuery) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT utt.id, utt.activity_id, utt.project_id, utt.task_id, utt.date,
                       utt.start_time, utt.end_time, utt.duration, utt.note,
                       a.name AS activity_name,
                       a.description AS activity_description,
                       t.description AS task_name,
                       c.name AS task_type,
                       p.name AS project_name,
                       COALESCE(utd.value_int, CAST(utd.value_decimal AS SIGNED)) AS pages,
                       CASE
                         WHEN utt.activity_id = %s AND {_DURATION} > 0 AND {_PAGES} IS NOT NULL
                         THEN ROUND({_PAGES} / {_DURATION}, 2)
                         ELSE NULL
                       END AS pagesPerMinute
                FROM users_time_tracking utt
                LEFT JOIN activities a ON a.id = utt.activity_id
                LEFT JOIN tasks t ON t.id = utt.task_id
                LEFT JOIN ref_task_category c ON c.id = t.category_id
                LEFT JOIN projects p ON p.id = utt.project_id
                LEFT JOIN users_time_tracking_data utd
                  ON utd.tracking_uuid = utt.uuid AND utd.data_def_id = %s
                WHERE utt.user_id = %s AND utt.date BETWEEN %s AND %s
                ORDER BY utt.date DESC, utt.start_time DESC, utt.id DESC
                """,
                (PRODUCTION_ACTIVITY_ID, PAGES_DATA_DEF_ID, query.user_id, query.date_from, query.date_to),
            )
            return fetchall(cur)

    def list_metrics(self, query: TrackingQuery) -> Sequence[dict]:
        placeholders = ",".join(["%s"] * len(METRICS_TASK_IDS))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT utt.id, utt.project_id, utt.task_id, utt.date,
                       utt.start_time, utt.end_time,
                       {_DURATION} AS duration,
                       t.description AS task_name,
                       p.name AS project_name,
                       COALESCE(utd.value_int, CAST(utd.value_decimal AS SIGNED)) AS pages,
                       CASE
                         WHEN {_DURATION} > 0 AND {_PAGES} IS NOT NULL
                         THEN ROUND({_PAGES} / {_DURATION}, 2)
                         ELSE NULL
                       END AS pagesPerMinute
                FROM users_time_tracking utt
                LEFT JOIN tasks t ON t.id = utt.task_id
                LEFT JOIN projects p ON p.id = utt.project_id
                LEFT JOIN users_time_tracking_data utd
                  ON utd.tracking_uuid = utt.uuid AND utd.data_def_id = %s
                WHERE utt.user_id = %s
                  AND utt.date BETWEEN %s AND %s
                  AND utt.activity_id = %s
                  AND utt.task_id IN ({placeholders})
                ORDER BY utt.date DESC, utt.start_time DESC, utt.id DESC
                """,
                (
                    PAGES_DATA_DEF_ID,
                    query.user_id,
                    query.date_from,
                    query.date_to,
                    PRODUCTION_ACTIVITY_ID,
                    *METRICS_TASK_IDS,
                ),
            )
            return fetchall(cur)

    def find_overlap(self, entry: ManualEntry) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id
                FROM users_time_tracking
                WHERE user_id=%s AND date=%s
                  AND start_time < %s
                  AND COALESCE(end_time, start_time) > %s
                LIMIT 1
                """,
                (entry.user_id, entry.day, entry.end_at, entry.start_at),
            )
            row = fetchone(cur)
            return int(row["id"]) if row else None

    def insert_manual(self, uuid: str, entry: ManualEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users_time_tracking(
                    uuid, user_id, date, project_id, activity_id, task_id, item_id,
                    start_time, end_time, duration, is_finished, note)
                VALUES(%s,%s,%s,NULL,%s,NULL,%s,%s,%s,%s,NULL,%s)
                """,
                (
                    uuid,
                    entry.user_id,
                    entry.day,
                    entry.activity_id,
                    entry.item_id,
                    entry.start_at,
                    entry.end_at,
                    entry.duration_minutes,
                    entry.note,
                ),
            )
            return int(cur.lastrowid)

    def update_note(self, entry_id: int, note: Optional[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users_time_tracking SET note=%s WHERE id=%s", (note, int(entry_id)))
