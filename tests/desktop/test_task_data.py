import pytest

from src.worktrack.worktrack.desktop.task_data import parse_value, project_data_column, tracking_data_column


def test_columns_by_value_type():
    assert project_data_column("INTEGER") == "value_int"
    assert project_data_column("customer_id") == "value_customer_id"
    assert tracking_data_column("customer_id") == "value_int"
    assert project_data_column("json") == "value_json"
    assert project_data_column("blob") is None


@pytest.mark.parametrize(
    "value_type, value, expected",
    [
        ("int", "42", 42),
        ("int", "4.5", 4.5),
        ("int", "abc", None),
        ("int", "inf", None),
        ("decimal", "3.25", 3.25),
        ("bool", "true", 1),
        ("bool", "no", 0),
        ("boolean", True, 1),
        ("date", "2026-03-02T10:00:00", "2026-03-02"),
        ("datetime", "2026-03-02T10:00", "2026-03-02 10:00:00"),
        ("json", {"a": 1}, '{"a": 1}'),
        ("varchar", 12, "12"),
        ("text", "", None),
        ("int", None, None),
    ],
)
def test_parse_value(value_type, value, expected):
    assert parse_value(value_type, value) == expected
