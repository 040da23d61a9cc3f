from __future__ import annotations

import math
from typing import Any, Optional


def normalize_string(value: Any) -> str:
    return "" if value is None else str(value).strip()


def positive_int(value: Any) -> int:
    """Parse an id-like value; anything that is not a positive integer yields 0."""

    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number <= 0 or not number.is_integer():
        return 0
    return int(number)


def optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    number = positive_int(value)
    return number or None


def first_present(payload: dict, *keys: str, default: Any = None) -> Any:
    """Return the first key present (and not None) in payload.

    Desktop clients send both snake_case and camelCase field names.
    """

    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return default
