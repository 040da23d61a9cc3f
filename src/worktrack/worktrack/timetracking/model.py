from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..common.datetime_utils import parse_clock_minutes, parse_iso_date
from ..common.validators import optional_int, positive_int
from ..core.constants import NOTE_MAX_LENGTH
from ..core.exceptions import ValidationError

RANGE_REQUIRED = "userId and either date or dateFrom/dateTo are required"


@dataclass(frozen=True)
class TrackingQuery:
    user_id: int
    date_from: date
    date_to: date

    @classmethod
    def from_args(cls, args) -> "TrackingQuery":
        user_id = positive_int(args.get("userId"))
        day = args.get("date")
        date_from = args.get("dateFrom")
        date_to = args.get("dateTo")
        if not user_id or (not day and not (date_from and date_to)):
            raise ValidationError(RANGE_REQUIRED)
        try:
            if day:
                start = end = parse_iso_date(day)
            else:
                start, end = parse_iso_date(date_from), parse_iso_date(date_to)
        except ValueError:
            raise ValidationError("Dates must use YYYY-MM-DD")
        return cls(user_id=user_id, date_from=start, date_to=end)


@dataclass(frozen=True)
class ManualEntry:
    user_id: int
    day: date
    activity_id: int
    start_minutes: int
    end_minutes: int
    note: Optional[str] = None
    item_id: Optional[int] = None

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    @staticmethod
    def _clock(day: date, minutes: int) -> str:
        return f"{day.isoformat()} {minutes // 60:02d}:{minutes % 60:02d}:00"

    @property
    def start_at(self) -> str:
        return self._clock(self.day, self.start_minutes)

    @property
    def end_at(self) -> str:
        return self._clock(self.day, self.end_minutes)

    @classmethod
    def from_payload(cls, payload: dict) -> "ManualEntry":
        user_id = positive_int(payload.get("userId"))
        activity_id = positive_int(payload.get("activityId"))
        day = payload.get("date")
        start_time = payload.get("startTime")
        end_time = payload.get("endTime")
        if not user_id or not day or not start_time or not end_time or not activity_id:
            raise ValidationError("userId, date, activityId, startTime, and endTime are required")

        start = parse_clock_minutes(start_time)
        end = parse_clock_minutes(end_time)
        if start is None or end is None:
            raise ValidationError("Invalid start or end time")
        if end <= start:
            raise ValidationError("End time must be after start time")
        try:
            parsed_day = parse_iso_date(str(day))
        except ValueError:
            raise ValidationError("Dates must use YYYY-MM-DD")

        return cls(
            user_id=user_id,
            day=parsed_day,
            activity_id=activity_id,
            start_minutes=start,
            end_minutes=end,
            note=clip_note(payload.get("note")),
            item_id=optional_int(payload.get("itemId")),
        )


def clip_note(value) -> Optional[str]:
    if value is None:
        return None
    return str(value)[:NOTE_MAX_LENGTH]
