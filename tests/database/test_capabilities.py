from src.worktrack.worktrack.database.capabilities import (
    OptionalTables,
    OptionalTableWarner,
    SchemaCapabilities,
    SchemaSnapshot,
)


def test_snapshot_from_information_schema_rows():
    snapshot = SchemaSnapshot.from_rows(
        [
            {"TABLE_NAME": "Projects", "COLUMN_NAME": "id", "EXTRA": "auto_increment"},
            {"table_name": "project_task_data", "column_name": "is_required", "extra": ""},
            {"table_name": "", "column_name": "ignored"},
        ]
    )

    assert snapshot.has_table("projects")
    assert snapshot.is_auto_increment("PROJECTS")
    assert snapshot.has_column("project_task_data", "IS_REQUIRED")
    assert not snapshot.is_auto_increment("project_task_data")
    assert not snapshot.has_table("cfs_items")


def test_capabilities_load_once_and_retry_after_failure():
    calls = []

    def loader():
        calls.append(1)
        if len(calls) == 1:
            raise ConnectionError("db down")
        return SchemaSnapshot(columns={"items": {}})

    caps = SchemaCapabilities(conn_factory=None, loader=loader)

    try:
        caps.has_table("items")
    except ConnectionError:
        pass

    assert caps.has_table("items")
    assert caps.has_table("items")
    assert len(calls) == 2


def test_warner_rate_limits_per_entity():
    now = [1000.0]
    warner = OptionalTableWarner(cooldown_seconds=300, clock=lambda: now[0])

    assert warner.warn("customers")
    assert not warner.warn("customers")
    assert warner.warn("items")

    now[0] += 301
    assert warner.warn("customers")


def test_optional_tables_reports_missing():
    caps = SchemaCapabilities(conn_factory=None, loader=lambda: SchemaSnapshot(columns={"users": {}}))
    warned = []

    class Warner:
        def warn(self, entity):
            warned.append(entity)
            return True

    optional = OptionalTables(caps, Warner())

    assert optional.available("users")
    assert not optional.available("users", "im_items", entity="legacy items")
    assert warned == ["legacy items"]
