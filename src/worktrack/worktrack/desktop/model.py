from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional


@dataclass(frozen=True)
class OpenActivity:
    """A clock-in: an open ``users_time_tracking`` row keyed by a client uuid."""

    uuid: str
    user_id: int
    activity_id: int
    started_at: datetime
    project_id: Optional[int] = None
    task_id: Optional[int] = None
    item_id: Optional[int] = None

    @property
    def day(self) -> date:
        return self.started_at.date()


@dataclass(frozen=True)
class TaskDataValue:
    data_def_id: int
    value_type: str
    value: Any = None


@dataclass(frozen=True)
class CompleteActivity:
    uuid: str
    user_id: int
    ended_at: datetime
    task_completed: bool = False
    note: Optional[str] = None
    task_data: tuple[TaskDataValue, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TrackingRecord:
    id: int
    uuid: str
    user_id: int
    activity_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    project_id: Optional[int] = None
    task_id: Optional[int] = None
    item_id: Optional[int] = None

    @property
    def is_closed(self) -> bool:
        return self.end_time is not None


@dataclass(frozen=True)
class ActivityOutcome:
    duplicate: bool = False
    ignored: bool = False

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"success": True}
        if self.duplicate:
            data["duplicate"] = True
        if self.ignored:
            data["ignored"] = True
        return data


STARTED = ActivityOutcome()
DUPLICATE = ActivityOutcome(duplicate=True)
IGNORED = ActivityOutcome(ignored=True)


# Datasets shipped to a desktop client at startup, mapped to the table whose
# absence makes the dataset optional.
BOOTSTRAP_DATASETS = {
    "users": None,
    "projects": None,
    "projectUsers": None,
    "projectRoles": None,
    "tasks": None,
    "customers": None,
    "itemTypes": "ref_item_types",
    "projectTasks": None,
    "projectTaskRoles": None,
    "taskDataDefinitions": "task_data_definitions",
    "projectTaskData": "project_task_data",
    "refItemStatus": "ref_item_status",
    "cfsItems": "cfs_items",
    "imItems": "im_items",
}
