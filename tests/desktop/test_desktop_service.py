import pytest

from src.worktrack.worktrack.core.exceptions import NotFoundError, ValidationError
from src.worktrack.worktrack.database.capabilities import (
    OptionalTables,
    OptionalTableWarner,
    SchemaCapabilities,
    SchemaSnapshot,
)
from src.worktrack.worktrack.desktop.service import DesktopService


def optional_tables(*tables, columns=None):
    snapshot = SchemaSnapshot(columns={t: dict(columns.get(t, {})) if columns else {} for t in tables})
    return OptionalTables(SchemaCapabilities(None, loader=lambda: snapshot), OptionalTableWarner())


class FakeDesktop:
    def __init__(self):
        self.items = []
        self.legacy = {}
        self.saved = []
        self.existing_data = set()
        self.finished = []
        self.with_required = None

    def bootstrap_dataset(self, name, *, active_status_id):
        return [{"dataset": name, "status": active_status_id}]

    def project_task_data(self, project_id, task_id, *, with_required):
        self.with_required = with_required
        return [{"dataDefId": 1}]

    def find_project_task_id(self, project_id, task_id):
        return 99 if (project_id, task_id) == (10, 3) else None

    def save_project_task_data(self, project_task_id, data_def_id, column, value):
        self.saved.append((project_task_id, data_def_id, column, value))
        key = (project_task_id, data_def_id)
        updated = key in self.existing_data
        self.existing_data.add(key)
        return updated

    def project_items(self, project_id):
        return self.items

    def legacy_project_items(self, table, project_id):
        return self.legacy.get(table, [])

    def item_status_rule(self, project_id, task_id, apply_after_finish):
        return {"statusId": 4, "applyAfterFinish": "1"}

    def mark_finished(self, *, uuid="", record_id=0):
        self.finished.append((uuid, record_id))


def test_bootstrap_empties_datasets_of_missing_tables():
    service = DesktopService(FakeDesktop(), optional_tables("ref_item_types", "cfs_items"))

    data = service.bootstrap()

    assert data["itemTypes"] == [{"dataset": "itemTypes", "status": 1}]
    assert data["cfsItems"]
    assert data["imItems"] == []
    assert data["taskDataDefinitions"] == []
    assert data["projects"] == [{"dataset": "projects", "status": 1}]


def test_project_task_data_detects_required_column():
    desktop = FakeDesktop()
    tables = optional_tables(
        "project_task_data", "task_data_definitions", columns={"project_task_data": {"is_required": ""}}
    )

    assert DesktopService(desktop, tables).project_task_data(10, 3) == [{"dataDefId": 1}]
    assert desktop.with_required is True


def test_project_task_data_without_tables_is_empty():
    assert DesktopService(FakeDesktop(), optional_tables()).project_task_data(10, 3) == []


def test_save_task_data_creates_then_updates():
    desktop = FakeDesktop()
    service = DesktopService(desktop, optional_tables())
    payload = {"valueType": "decimal", "value": "2.5"}

    first = service.save_task_data(payload, project_id=10, task_id=3, data_def_id=1)
    second = service.save_task_data(payload, project_id=10, task_id=3, data_def_id=1)

    assert first == {"success": True, "created": True}
    assert second == {"success": True, "updated": True}
    assert desktop.saved[0] == (99, 1, "value_decimal", 2.5)


def test_save_task_data_errors():
    service = DesktopService(FakeDesktop(), optional_tables())
    with pytest.raises(ValidationError):
        service.save_task_data({"valueType": "blob"}, project_id=10, task_id=3, data_def_id=1)
    with pytest.raises(NotFoundError):
        service.save_task_data({"valueType": "int"}, project_id=11, task_id=3, data_def_id=1)


def test_project_items_falls_back_to_legacy_table():
    desktop = FakeDesktop()
    desktop.legacy["im_items"] = [{"id": 1, "label": "Box 1"}]
    service = DesktopService(desktop, optional_tables("items", "ref_item_status", "im_items"))

    assert service.project_items(10, 2) == [{"id": 1, "label": "Box 1"}]
    assert service.project_items(10, 7) == []

    desktop.items = [{"id": 5}]
    assert service.project_items(10, 2) == [{"id": 5}]


def test_item_status_rule_normalizes_flag():
    service = DesktopService(FakeDesktop(), optional_tables("itemstatus_task", "ref_item_status"))

    assert service.item_status_rule(10, 3, "1") == {"statusId": 4, "applyAfterFinish": 1}
    with pytest.raises(ValidationError):
        service.item_status_rule(10, 3, "later")


def test_mark_unfinished_finished_needs_an_identifier():
    desktop = FakeDesktop()
    service = DesktopService(desktop, optional_tables())

    service.mark_unfinished_finished(uuid="u-1", record_id=0)
    assert desktop.finished == [("u-1", 0)]
    with pytest.raises(ValidationError):
        service.mark_unfinished_finished(uuid="", record_id=0)
