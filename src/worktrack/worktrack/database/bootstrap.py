"""Apply ``database/schema.sql`` to the configured MySQL server.

The schema file is written to be re-runnable (``CREATE TABLE IF NOT EXISTS``),
so the bootstrap can run on every start in development.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig

log = logging.getLogger(__name__)

# A statement ends at a ';' outside quotes; quoted runs may contain ';' and
# backslash escapes.
_TOKEN = re.compile(r"'(?:\\.|[^'\\])*'|\"(?:\\.|[^\"\\])*\"|`[^`]*`|;|[^'\"`;]+|.", re.S)
_COMMENT_LINE = re.compile(r"(?m)^\s*--.*$")
# Database selection comes from DB_CONFIG, never from the file.
_DB_SELECTION = re.compile(r"(?im)^\s*(?:CREATE\s+DATABASE|USE)\b[^;]*;")


def split_statements(sql: str) -> Iterator[str]:
    sql = _DB_SELECTION.sub("", _COMMENT_LINE.sub("", sql))
    current: list[str] = []
    for token in _TOKEN.findall(sql):
        if token != ";":
            current.append(token)
            continue
        statement = "".join(current).strip()
        current = []
        if statement:
            yield statement
    tail = "".join(current).strip()
    if tail:
        yield tail


def _open(config: DBConfig, *, select_database: bool = True):
    options = {
        "host": config.host,
        "port": int(config.port),
        "user": config.user,
        "password": config.password,
    }
    if select_database:
        options["database"] = config.database
    return mysql.connector.connect(**options)


def create_database(config: DBConfig) -> None:
    conn = _open(config, select_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(config: DBConfig, *, schema_path: str | Path) -> int:
    """Create the database if needed and run every schema statement; returns the count."""

    create_database(config)
    statements = list(split_statements(Path(schema_path).read_text(encoding="utf-8")))

    conn = _open(config)
    try:
        cur = conn.cursor()
        for statement in statements:
            cur.execute(statement)
        conn.commit()
    finally:
        conn.close()
    log.debug("Applied %d schema statements to %s", len(statements), config.database)
    return len(statements)


def list_tables(config: DBConfig) -> list[str]:
    conn = _open(config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(str(row[0]) for row in cur.fetchall())
    finally:
        conn.close()
