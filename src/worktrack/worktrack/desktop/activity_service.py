"""Clock-in / clock-out lifecycle of tracked activities.

Clients generate the uuid of every activity and may replay the same request
after a lost response or from their offline queue, so every operation is
idempotent on that uuid:

* start on a known uuid reports ``duplicate`` and inserts nothing;
* complete on an unknown uuid reports ``ignored``;
* complete on a closed record reports ``duplicate`` and writes nothing.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import diff_minutes, parse_client_timestamp
from ..common.validators import first_present, normalize_string, optional_int, positive_int
from ..core.constants import (
    DEFAULT_UNALLOCATED_ACTIVITY_ID,
    MAX_TRACKED_DURATION_MINUTES,
    NOTE_MAX_LENGTH,
    PRODUCTION_ACTIVITY_ID,
)
from ..core.exceptions import ValidationError
from .model import (
    DUPLICATE,
    IGNORED,
    STARTED,
    ActivityOutcome,
    CompleteActivity,
    OpenActivity,
    TaskDataValue,
)
from .repository import ActivityRepository
from .task_data import parse_value, tracking_data_column

log = logging.getLogger(__name__)


def _timestamp(payload: dict) -> datetime:
    try:
        return parse_client_timestamp(payload.get("timestamp"))
    except ValueError:
        raise ValidationError("timestamp must be an ISO-8601 date-time")


def _task_data(payload: dict) -> tuple[TaskDataValue, ...]:
    rows = first_present(payload, "taskData", "task_data", default=[])
    if not isinstance(rows, list):
        return ()
    values = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        data_def_id = positive_int(first_present(row, "data_def_id", "dataDefId"))
        value_type = normalize_string(first_present(row, "value_type", "valueType"))
        if data_def_id and value_type:
            values.append(TaskDataValue(data_def_id, value_type, row.get("value")))
    return tuple(values)


class ActivityService:
    def __init__(self, activities: ActivityRepository):
        self._activities = activities

    # Request parsing. ``user_id`` is already scoped by the caller.

    @staticmethod
    def parse_start_unallocated(payload: dict, user_id: int) -> OpenActivity:
        uuid = normalize_string(payload.get("uuid"))
        activity_id = positive_int(
            first_present(payload, "activity_id", "activityId", default=DEFAULT_UNALLOCATED_ACTIVITY_ID)
        )
        if not uuid or not user_id or not activity_id:
            raise ValidationError("uuid, user_id/userId and activity_id/activityId are required")
        return OpenActivity(uuid=uuid, user_id=user_id, activity_id=activity_id, started_at=_timestamp(payload))

    @staticmethod
    def parse_start_task(payload: dict, user_id: int) -> OpenActivity:
        uuid = normalize_string(payload.get("uuid"))
        project_id = positive_int(first_present(payload, "project_id", "projectId"))
        task_id = positive_int(first_present(payload, "task_id", "taskId"))
        if not uuid or not user_id or not project_id or not task_id:
            raise ValidationError("uuid, user_id/userId, project_id/projectId and task_id/taskId are required")
        return OpenActivity(
            uuid=uuid,
            user_id=user_id,
            activity_id=PRODUCTION_ACTIVITY_ID,
            started_at=_timestamp(payload),
            project_id=project_id,
            task_id=task_id,
            item_id=optional_int(first_present(payload, "item_id", "itemId")),
        )

    @staticmethod
    def parse_complete(payload: dict, user_id: int) -> CompleteActivity:
        uuid = normalize_string(payload.get("uuid"))
        if not uuid or not user_id:
            raise ValidationError("uuid and user_id/userId are required")
        completed = first_present(payload, "is_completed_project_task", "isTaskCompleted", default=0)
        note = payload.get("note")
        return CompleteActivity(
            uuid=uuid,
            user_id=user_id,
            ended_at=_timestamp(payload),
            task_completed=positive_int(completed) == 1 or completed is True,
            note=None if note is None else str(note).strip()[:NOTE_MAX_LENGTH],
            task_data=_task_data(payload),
        )

    # Lifecycle

    def start(self, activity: OpenActivity) -> ActivityOutcome:
        if self._activities.exists(activity.uuid):
            return DUPLICATE
        # Two replays can both pass the check; the unique uuid decides.
        if not self._activities.insert_open(activity):
            return DUPLICATE
        log.info("Activity %s started (user=%s activity=%s)", activity.uuid, activity.user_id, activity.activity_id)
        return STARTED

    def complete(self, command: CompleteActivity) -> ActivityOutcome:
        with self._activities.completion(command.uuid) as session:
            record = session.record
            if record is None:
                session.abandon()
                return IGNORED
            if record.is_closed:
                session.abandon()
                return DUPLICATE

            duration = min(diff_minutes(record.start_time, command.ended_at), MAX_TRACKED_DURATION_MINUTES)
            is_production = record.activity_id == PRODUCTION_ACTIVITY_ID
            is_finished = 1 if not is_production or command.task_completed else 0
            session.close_record(end_time=command.ended_at, duration=duration, is_finished=is_finished)

            for value in command.task_data:
                column = tracking_data_column(value.value_type)
                if column:
                    session.upsert_data(value.data_def_id, column, parse_value(value.value_type, value.value))

            note: Optional[str] = command.note
            if note:
                if is_production:
                    session.add_production_note(command.user_id, note)
                else:
                    session.set_note(note)

        log.info("Activity %s completed (duration=%s finished=%s)", command.uuid, duration, is_finished)
        return ActivityOutcome()
