"""Change tracking for the storage layer.

:class:`TrackedDatabase` exposes the same ``connect()`` interface as
:class:`DatabaseConnection` and wraps every borrowed connection so that
effective mutations are reported to the :class:`ChangeBus`. Repositories do not
know whether they were handed a tracked or a plain database.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..events.bus import ChangeBus

# Statements whose leading keyword is in this list count as mutations.
MUTATION_KEYWORDS = frozenset(
    {"INSERT", "UPDATE", "DELETE", "REPLACE", "CREATE", "ALTER", "DROP", "TRUNCATE", "RENAME"}
)

_LEADING_KEYWORD = re.compile(r"^[\s(]*([A-Za-z]+)\b")


def leading_keyword(sql: Any) -> Optional[str]:
    if not isinstance(sql, str):
        return None
    match = _LEADING_KEYWORD.match(sql)
    return match.group(1).upper() if match else None


def is_mutation_sql(sql: Any) -> bool:
    return leading_keyword(sql) in MUTATION_KEYWORDS


@dataclass(frozen=True)
class MutationResult:
    affected_rows: int = 0
    insert_id: int = 0


def _positive(value: Any) -> bool:
    try:
        return value is not None and int(value) > 0
    except (TypeError, ValueError):
        return False


def result_has_mutation(result: Any) -> bool:
    """True when a result (or any result of a batch) touched or created rows."""

    if result is None:
        return False
    if isinstance(result, (list, tuple)):
        return any(result_has_mutation(entry) for entry in result)
    if isinstance(result, Mapping):
        return _positive(result.get("affected_rows")) or _positive(result.get("insert_id"))
    return _positive(getattr(result, "affected_rows", None)) or _positive(getattr(result, "insert_id", None))


def is_effective_mutation(sql: Any, result: Any) -> bool:
    return is_mutation_sql(sql) and result_has_mutation(result)


@dataclass
class TransactionState:
    in_transaction: bool = False
    has_mutation: bool = False

    def begin(self) -> None:
        self.in_transaction = True
        self.has_mutation = False

    def mark_mutation(self) -> None:
        self.has_mutation = True

    def finish(self) -> bool:
        """Leave the transaction; returns whether it contained a mutation."""

        had_mutation = self.in_transaction and self.has_mutation
        self.in_transaction = False
        self.has_mutation = False
        return had_mutation


class TrackedCursor:
    def __init__(self, raw, connection: "TrackedConnection"):
        self._raw = raw
        self._connection = connection

    def execute(self, operation, params=None, *args, **kwargs):
        response = self._raw.execute(operation, params, *args, **kwargs)
        self._connection.record(operation, self._result(), source="connection-execute")
        return response

    def executemany(self, operation, seq_params, *args, **kwargs):
        response = self._raw.executemany(operation, seq_params, *args, **kwargs)
        self._connection.record(operation, self._result(), source="connection-executemany")
        return response

    def _result(self) -> MutationResult:
        return MutationResult(
            affected_rows=self._raw.rowcount or 0,
            insert_id=self._raw.lastrowid or 0,
        )

    def __iter__(self):
        return iter(self._raw)

    def __getattr__(self, name):
        return getattr(self._raw, name)


class TrackedConnection:
    def __init__(self, raw, bus: ChangeBus):
        self._raw = raw
        self._bus = bus
        self.state = TransactionState()

    def cursor(self, *args, **kwargs) -> TrackedCursor:
        return TrackedCursor(self._raw.cursor(*args, **kwargs), self)

    def start_transaction(self, *args, **kwargs):
        response = self._raw.start_transaction(*args, **kwargs)
        self.state.begin()
        return response

    def commit(self):
        response = self._raw.commit()
        if self.state.finish():
            self._bus.schedule("transaction-commit")
        return response

    def rollback(self):
        try:
            return self._raw.rollback()
        finally:
            self.state.finish()

    def close(self):
        self.state.finish()
        return self._raw.close()

    def record(self, sql: Any, result: Any, *, source: str) -> None:
        if not is_effective_mutation(sql, result):
            return
        if self.state.in_transaction:
            self.state.mark_mutation()
        else:
            self._bus.schedule(source)

    def __getattr__(self, name):
        return getattr(self._raw, name)


class TrackedDatabase:
    def __init__(self, inner, bus: ChangeBus):
        self._inner = inner
        self._bus = bus

    @property
    def bus(self) -> ChangeBus:
        return self._bus

    def connect(self) -> TrackedConnection:
        return TrackedConnection(self._inner.connect(), self._bus)

    def close(self) -> None:
        close = getattr(self._inner, "close", None)
        if close is not None:
            close()
