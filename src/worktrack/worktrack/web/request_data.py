from __future__ import annotations

from typing import Any

from flask import request

from ..common.validators import positive_int


def json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def query_int(name: str) -> int:
    return positive_int(request.args.get(name))
