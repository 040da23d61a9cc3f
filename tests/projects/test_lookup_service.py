from src.worktrack.worktrack.database.capabilities import (
    OptionalTables,
    OptionalTableWarner,
    SchemaCapabilities,
    SchemaSnapshot,
)
from src.worktrack.worktrack.lookups.service import LookupService


class StaticLookups:
    def __getattr__(self, name):
        return lambda: [{"source": name}]


def test_project_form_blanks_missing_optional_tables():
    snapshot = SchemaSnapshot(columns={"users": {}})
    optional = OptionalTables(SchemaCapabilities(None, loader=lambda: snapshot), OptionalTableWarner())

    form = LookupService(StaticLookups(), optional).project_form()

    assert form["customers"] == []
    assert form["items"] == []
    assert form["users"] == [{"source": "users"}]
    assert form["taskCategories"] == [{"source": "task_categories"}]
    assert set(form) == {
        "projectTypes",
        "statuses",
        "customers",
        "items",
        "units",
        "users",
        "roles",
        "tasks",
        "taskCategories",
    }
