from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from .mysql_base import db_cursor, fetchall

log = logging.getLogger(__name__)

# Tables that older or partial deployments may not have. Endpoints touching
# them degrade to empty results instead of failing.
OPTIONAL_TABLES = frozenset(
    {
        "users",
        "customers",
        "ref_item_types",
        "ref_item_status",
        "task_data_definitions",
        "project_task_data",
        "itemstatus_task",
        "cfs_items",
        "im_items",
        "items",
    }
)


@dataclass
class SchemaSnapshot:
    columns: dict[str, dict[str, str]] = field(default_factory=dict)

    def has_table(self, table: str) -> bool:
        return table.lower() in self.columns

    def has_column(self, table: str, column: str) -> bool:
        return column.lower() in self.columns.get(table.lower(), {})

    def is_auto_increment(self, table: str, column: str = "id") -> bool:
        extra = self.columns.get(table.lower(), {}).get(column.lower(), "")
        return "auto_increment" in extra.lower()

    @classmethod
    def from_rows(cls, rows: Iterable[dict]) -> "SchemaSnapshot":
        snapshot = cls()
        for row in rows:
            table = str(row.get("table_name") or row.get("TABLE_NAME") or "").lower()
            column = str(row.get("column_name") or row.get("COLUMN_NAME") or "").lower()
            extra = str(row.get("extra") or row.get("EXTRA") or "")
            if not table:
                continue
            snapshot.columns.setdefault(table, {})
            if column:
                snapshot.columns[table][column] = extra
        return snapshot


class SchemaCapabilities:
    """Schema introspection done once, answering "does this table/column exist?".

    The snapshot is loaded on first use and kept for the process lifetime. A
    failed load (database down at startup) is retried on the next call.
    """

    def __init__(self, conn_factory, *, loader: Optional[Callable[[], SchemaSnapshot]] = None):
        self._conn_factory = conn_factory
        self._loader = loader or self._load_from_information_schema
        self._snapshot: Optional[SchemaSnapshot] = None
        self._lock = threading.Lock()

    def _load_from_information_schema(self) -> SchemaSnapshot:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT table_name AS table_name, column_name AS column_name, extra AS extra
                FROM information_schema.columns
                WHERE table_schema = DATABASE()
                """
            )
            return SchemaSnapshot.from_rows(fetchall(cur))

    def snapshot(self) -> SchemaSnapshot:
        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._loader()
                log.info("Schema capabilities loaded (tables=%d)", len(self._snapshot.columns))
            return self._snapshot

    def has_table(self, table: str) -> bool:
        return self.snapshot().has_table(table)

    def has_column(self, table: str, column: str) -> bool:
        return self.snapshot().has_column(table, column)

    def is_auto_increment(self, table: str, column: str = "id") -> bool:
        return self.snapshot().is_auto_increment(table, column)


class OptionalTableWarner:
    """Logs "optional table missing" at most once per entity per cooldown."""

    def __init__(self, *, cooldown_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self._cooldown = float(cooldown_seconds)
        self._clock = clock
        self._last: dict[str, float] = {}
        self._lock = threading.Lock()

    def warn(self, entity: str) -> bool:
        now = self._clock()
        with self._lock:
            previous = self._last.get(entity)
            if previous is not None and now - previous < self._cooldown:
                return False
            self._last[entity] = now
        log.warning("Optional table missing for %s, returning empty result.", entity)
        return True


class OptionalTables:
    """Capability check plus rate-limited warning, used by repositories."""

    def __init__(self, capabilities: SchemaCapabilities, warner: OptionalTableWarner):
        self.capabilities = capabilities
        self._warner = warner

    def available(self, *tables: str, entity: Optional[str] = None) -> bool:
        missing = [t for t in tables if not self.capabilities.has_table(t)]
        if not missing:
            return True
        self._warner.warn(entity or missing[0])
        return False
