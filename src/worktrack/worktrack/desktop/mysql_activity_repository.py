from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from mysql.connector import errors as mysql_errors

from ..common.datetime_utils import format_mysql_datetime
from ..database.mysql_base import db_cursor, db_transaction, fetchone, is_duplicate_key_error
from .model import OpenActivity, TrackingRecord
from .repository import ActivityRepository, CompletionSession

log = logging.getLogger(__name__)


class MySQLCompletionSession(CompletionSession):
    def __init__(self, conn, cur, uuid: str, record: Optional[TrackingRecord]):
        self._conn = conn
        self._cur = cur
        self._uuid = uuid
        self.record = record

    def close_record(self, *, end_time, duration: int, is_finished: int) -> None:
        self._cur.execute(
            "UPDATE users_time_tracking SET end_time=%s, duration=%s, is_finished=%s WHERE uuid=%s",
            (format_mysql_datetime(end_time), duration, is_finished, self._uuid),
        )

    def upsert_data(self, data_def_id: int, column: str, value: Any) -> None:
        self._cur.execute(
            f"""
            INSERT INTO users_time_tracking_data(tracking_uuid, data_def_id, {column})
            VALUES(%s,%s,%s)
            ON DUPLICATE KEY UPDATE {column}=VALUES({column}), updated_at=CURRENT_TIMESTAMP
            """,
            (self._uuid, data_def_id, value),
        )

    def add_production_note(self, user_id: int, note: str) -> None:
        record = self.record
        self._cur.execute(
            """
            INSERT INTO prod_notes(item_id, unit_id, user_id, task_id, activity_id, note, created_at, project_id)
            VALUES(%s,NULL,%s,%s,%s,%s,NOW(),%s)
            """,
            (record.item_id, user_id, record.task_id, record.activity_id, note, record.project_id),
        )

    def set_note(self, note: str) -> None:
        self._cur.execute("UPDATE users_time_tracking SET note=%s WHERE uuid=%s", (note, self._uuid))

    def abandon(self) -> None:
        self._conn.rollback()


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory):
        self._conn_factory = conn_factory

    def exists(self, uuid: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM users_time_tracking WHERE uuid=%s LIMIT 1", (uuid,))
            return fetchone(cur) is not None

    def insert_open(self, activity: OpenActivity) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users_time_tracking(
                        uuid, user_id, date, project_id, activity_id, task_id, item_id,
                        start_time, end_time, duration, is_finished, note)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,NULL,NULL,NULL,NULL)
                    """,
                    (
                        activity.uuid,
                        activity.user_id,
                        activity.day,
                        activity.project_id,
                        activity.activity_id,
                        activity.task_id,
                        activity.item_id,
                        format_mysql_datetime(activity.started_at),
                    ),
                )
        except mysql_errors.Error as exc:
            if is_duplicate_key_error(exc):
                log.info("Activity %s already recorded", activity.uuid)
                return False
            raise
        return True

    @contextmanager
    def completion(self, uuid: str) -> Iterator[MySQLCompletionSession]:
        with db_transaction(self._conn_factory) as (conn, cur):
            cur.execute(
                """
                SELECT id, uuid, start_time, end_time, activity_id, user_id, project_id, task_id, item_id
                FROM users_time_tracking
                WHERE uuid=%s
                LIMIT 1
                FOR UPDATE
                """,
                (uuid,),
            )
            row = fetchone(cur)
            record = None
            if row:
                record = TrackingRecord(
                    id=int(row["id"]),
                    uuid=row["uuid"],
                    user_id=int(row["user_id"]),
                    activity_id=int(row["activity_id"]),
                    start_time=row["start_time"],
                    end_time=row.get("end_time"),
                    project_id=row.get("project_id"),
                    task_id=row.get("task_id"),
                    item_id=row.get("item_id"),
                )
            yield MySQLCompletionSession(conn, cur, uuid, record)
