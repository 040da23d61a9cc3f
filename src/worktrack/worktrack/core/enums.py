from __future__ import annotations

from enum import Enum


class Role(int, Enum):
    """Numeric system role carried in access tokens and `users.system_role`."""

    ADMIN = 1
    EMPLOYEE = 2
    CUSTOMER = 3


class ValueType(str, Enum):
    """Value types a task-data definition may declare."""

    INT = "int"
    INTEGER = "integer"
    DECIMAL = "decimal"
    VARCHAR = "varchar"
    TEXT = "text"
    BOOL = "bool"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    CUSTOMER_ID = "customer_id"
    JSON = "json"
