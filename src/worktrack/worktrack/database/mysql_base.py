from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector import errors as mysql_errors


@contextmanager
def db_cursor(conn_factory, *, dictionary: bool = True):
    """Borrow a connection for single autocommitted statements.

    ``conn_factory`` is anything with ``connect()``: DatabaseConnection,
    TrackedDatabase or a test fake.
    """

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
        finally:
            cur.close()
    finally:
        conn.close()


@contextmanager
def db_transaction(conn_factory, *, dictionary: bool = True):
    """Borrow one connection and run everything inside an explicit transaction.

    Commits when the block exits normally, rolls back and re-raises otherwise.
    Callers that decide to abandon the work without an error call
    ``conn.rollback()`` themselves; the final commit is then a no-op.
    """

    conn = conn_factory.connect()
    try:
        conn.start_transaction()
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cur.close()
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key_error(error: BaseException) -> bool:
    return isinstance(error, mysql_errors.Error) and getattr(error, "errno", None) == errorcode.ER_DUP_ENTRY

