from __future__ import annotations

from typing import Sequence

from ..database.capabilities import OptionalTables
from .repository import LookupRepository


class LookupService:
    """Reference data for the admin forms.

    Lists backed by optional tables come back empty when the table is missing.
    """

    def __init__(self, lookups: LookupRepository, optional: OptionalTables):
        self._lookups = lookups
        self._optional = optional

    def project_form(self) -> dict:
        return {
            "projectTypes": list(self._lookups.project_types()),
            "statuses": list(self._lookups.project_statuses()),
            "customers": list(self._lookups.customers()) if self._optional.available("customers") else [],
            "items": list(self._lookups.item_types()) if self._optional.available("ref_item_types") else [],
            "units": list(self._lookups.unit_types()),
            "users": list(self._lookups.users()) if self._optional.available("users") else [],
            "roles": list(self._lookups.project_roles()),
            "tasks": list(self._lookups.tasks()),
            "taskCategories": list(self._lookups.task_categories()),
        }

    def task_categories(self) -> Sequence[dict]:
        return self._lookups.task_categories()
