from __future__ import annotations

from typing import Any, ContextManager, Optional, Protocol, Sequence

from .model import OpenActivity, TrackingRecord


class DesktopRepository(Protocol):
    def bootstrap_dataset(self, name: str, *, active_status_id: int) -> Sequence[dict]:
        raise NotImplementedError

    def project_task_data(self, project_id: int, task_id: int, *, with_required: bool) -> Sequence[dict]:
        raise NotImplementedError

    def find_project_task_id(self, project_id: int, task_id: int) -> Optional[int]:
        raise NotImplementedError

    def save_project_task_data(self, project_task_id: int, data_def_id: int, column: str, value: Any) -> bool:
        """Write one value; returns True when an existing row was updated."""
        raise NotImplementedError

    def available_tasks(self, user_id: int, project_id: int) -> Sequence[dict]:
        raise NotImplementedError

    def project_items(self, project_id: int) -> Sequence[dict]:
        raise NotImplementedError

    def legacy_project_items(self, table: str, project_id: int) -> Sequence[dict]:
        raise NotImplementedError

    def item_tracking_tasks(self, project_id: int) -> Sequence[int]:
        raise NotImplementedError

    def item_status_rule(self, project_id: int, task_id: int, apply_after_finish: Optional[int]) -> Optional[dict]:
        raise NotImplementedError

    def set_item_status(self, item_id: int, status_id: int) -> None:
        raise NotImplementedError

    def unfinished_tasks(self, user_id: int) -> Sequence[dict]:
        raise NotImplementedError

    def pending_assignments(self, user_id: int) -> Sequence[dict]:
        raise NotImplementedError

    def accept_assignment(self, assignment_id: int) -> None:
        raise NotImplementedError

    def mark_finished(self, *, uuid: str = "", record_id: int = 0) -> None:
        raise NotImplementedError


class CompletionSession(Protocol):
    """Work done while a tracking row is locked for completion.

    Everything runs in one transaction; :meth:`abandon` ends it without
    writing anything.
    """

    record: Optional[TrackingRecord]

    def close_record(self, *, end_time, duration: int, is_finished: int) -> None:
        raise NotImplementedError

    def upsert_data(self, data_def_id: int, column: str, value: Any) -> None:
        raise NotImplementedError

    def add_production_note(self, user_id: int, note: str) -> None:
        raise NotImplementedError

    def set_note(self, note: str) -> None:
        raise NotImplementedError

    def abandon(self) -> None:
        raise NotImplementedError


class ActivityRepository(Protocol):
    def exists(self, uuid: str) -> bool:
        raise NotImplementedError

    def insert_open(self, activity: OpenActivity) -> bool:
        """Insert an open row; returns False when the uuid already exists."""
        raise NotImplementedError

    def completion(self, uuid: str) -> ContextManager[CompletionSession]:
        raise NotImplementedError
