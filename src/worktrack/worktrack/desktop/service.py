from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..core.constants import ACTIVE_PROJECT_STATUS_ID
from ..core.exceptions import NotFoundError, ValidationError
from ..database.capabilities import OptionalTables
from .model import BOOTSTRAP_DATASETS
from .repository import DesktopRepository
from .task_data import parse_value, project_data_column

log = logging.getLogger(__name__)

# projects.type_code values whose items live in a legacy per-type table
_LEGACY_ITEM_TABLE_BY_TYPE = {1: "cfs_items", 2: "im_items"}


class DesktopService:
    """Read and housekeeping operations behind the desktop facade."""

    def __init__(self, desktop: DesktopRepository, optional: OptionalTables):
        self._desktop = desktop
        self._optional = optional

    def bootstrap(self) -> dict:
        data = {}
        for name, table in BOOTSTRAP_DATASETS.items():
            if table and not self._optional.available(table, entity=table):
                data[name] = []
                continue
            data[name] = list(self._desktop.bootstrap_dataset(name, active_status_id=ACTIVE_PROJECT_STATUS_ID))
        return data

    def project_task_data(self, project_id: int, task_id: int) -> Sequence[dict]:
        if not project_id or not task_id:
            raise ValidationError("projectId and taskId are required")
        if not self._optional.available("project_task_data", "task_data_definitions", entity="project_task_data"):
            return []
        with_required = self._optional.capabilities.has_column("project_task_data", "is_required")
        return self._desktop.project_task_data(project_id, task_id, with_required=with_required)

    def save_task_data(self, payload: dict, *, project_id: int, task_id: int, data_def_id: int) -> dict:
        value_type = str(payload.get("valueType") or "")
        if not project_id or not task_id or not data_def_id or not value_type:
            raise ValidationError("projectId, taskId, dataDefId and valueType are required")
        column = project_data_column(value_type)
        if not column:
            raise ValidationError("Invalid value type")
        project_task_id = self._desktop.find_project_task_id(project_id, task_id)
        if project_task_id is None:
            raise NotFoundError("Project task not found")
        value = parse_value(value_type, payload.get("value"))
        if self._desktop.save_project_task_data(project_task_id, data_def_id, column, value):
            return {"success": True, "updated": True}
        return {"success": True, "created": True}

    def available_tasks(self, user_id: int, project_id: int) -> Sequence[dict]:
        if not user_id or not project_id:
            raise ValidationError("userId and projectId are required")
        return self._desktop.available_tasks(user_id, project_id)

    def project_items(self, project_id: int, project_type_id: int = 0) -> Sequence[dict]:
        if not project_id:
            raise ValidationError("projectId is required")
        if self._optional.available("items", "ref_item_status", entity="items"):
            rows = self._desktop.project_items(project_id)
            if rows:
                return rows
        legacy = _LEGACY_ITEM_TABLE_BY_TYPE.get(project_type_id)
        if legacy and self._optional.available(legacy):
            return self._desktop.legacy_project_items(legacy, project_id)
        return []

    def item_tracking_tasks(self, project_id: int) -> Sequence[int]:
        if not project_id:
            raise ValidationError("projectId is required")
        if not self._optional.available("itemstatus_task", "ref_item_status", entity="itemstatus_task"):
            return []
        return self._desktop.item_tracking_tasks(project_id)

    def item_status_rule(self, project_id: int, task_id: int, apply_after_finish: Any = None) -> Optional[dict]:
        if not project_id or not task_id:
            raise ValidationError("projectId and taskId are required")
        flag: Optional[int] = None
        if apply_after_finish is not None and apply_after_finish != "":
            try:
                flag = int(apply_after_finish)
            except (TypeError, ValueError):
                raise ValidationError("applyAfterFinish must be 0 or 1")
        if not self._optional.available("itemstatus_task", "ref_item_status", entity="itemstatus_task"):
            return None
        row = self._desktop.item_status_rule(project_id, task_id, flag)
        if not row:
            return None
        return {
            "statusId": row["statusId"],
            "applyAfterFinish": 1 if int(row.get("applyAfterFinish") or 0) == 1 else 0,
        }

    def set_item_status(self, item_id: int, status_id: int) -> None:
        if not item_id or not status_id:
            raise ValidationError("itemId and statusId are required")
        self._desktop.set_item_status(item_id, status_id)

    def unfinished_tasks(self, user_id: int) -> Sequence[dict]:
        if not user_id:
            raise ValidationError("userId is required")
        return self._desktop.unfinished_tasks(user_id)

    def assignments(self, user_id: int) -> Sequence[dict]:
        if not user_id:
            raise ValidationError("userId is required")
        return self._desktop.pending_assignments(user_id)

    def accept_assignment(self, assignment_id: int) -> None:
        if not assignment_id:
            raise ValidationError("assignmentId is required")
        self._desktop.accept_assignment(assignment_id)

    def mark_unfinished_finished(self, *, uuid: str, record_id: int) -> None:
        if not uuid and not record_id:
            raise ValidationError("recordId or uuid is required")
        self._desktop.mark_finished(uuid=uuid, record_id=record_id)
