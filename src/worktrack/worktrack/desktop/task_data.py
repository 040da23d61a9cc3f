"""Typed task-data values.

A data definition declares a value type; the value is stored in the matching
``value_*`` column of ``project_task_data`` or ``users_time_tracking_data``.
"""
from __future__ import annotations

import json
import math
from typing import Any, Optional

from ..core.enums import ValueType

_PROJECT_COLUMNS = {
    ValueType.INT: "value_int",
    ValueType.INTEGER: "value_int",
    ValueType.DECIMAL: "value_decimal",
    ValueType.VARCHAR: "value_varchar",
    ValueType.TEXT: "value_text",
    ValueType.BOOL: "value_bool",
    ValueType.BOOLEAN: "value_bool",
    ValueType.DATE: "value_date",
    ValueType.DATETIME: "value_datetime",
    ValueType.CUSTOMER_ID: "value_customer_id",
    ValueType.JSON: "value_json",
}

VALUE_COLUMNS = tuple(sorted(set(_PROJECT_COLUMNS.values())))


def normalize_value_type(value_type: Any) -> Optional[ValueType]:
    try:
        return ValueType(str(value_type or "").strip().lower())
    except ValueError:
        return None


def project_data_column(value_type: Any) -> Optional[str]:
    kind = normalize_value_type(value_type)
    return _PROJECT_COLUMNS.get(kind) if kind else None


def tracking_data_column(value_type: Any) -> Optional[str]:
    # users_time_tracking_data has no customer column; ids go to value_int.
    if normalize_value_type(value_type) is ValueType.CUSTOMER_ID:
        return "value_int"
    return project_data_column(value_type)


def _number(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_value(value_type: Any, value: Any) -> Any:
    """Coerce a client-supplied value for storage; empty input becomes NULL."""

    kind = normalize_value_type(value_type)
    if value is None or value == "":
        return None
    if kind in (ValueType.INT, ValueType.INTEGER, ValueType.CUSTOMER_ID):
        number = _number(value)
        if number is None:
            return None
        return int(number) if number.is_integer() else number
    if kind is ValueType.DECIMAL:
        return _number(value)
    if kind in (ValueType.BOOL, ValueType.BOOLEAN):
        if isinstance(value, (bool, int, float)):
            return 1 if value else 0
        return 1 if str(value).strip().lower() in ("true", "1") else 0
    if kind is ValueType.JSON:
        return value if isinstance(value, str) else json.dumps(value)
    if kind is ValueType.DATE:
        return str(value).strip()[:10] or None
    if kind is ValueType.DATETIME:
        raw = str(value).strip().replace("T", " ")
        if not raw:
            return None
        return f"{raw}:00" if len(raw) == 16 else raw
    return str(value)
