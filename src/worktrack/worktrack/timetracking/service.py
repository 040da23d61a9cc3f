from __future__ import annotations

import logging
import uuid as uuid_lib
from typing import Callable, Optional, Sequence

from ..core.constants import MAX_TRACKED_DURATION_MINUTES
from ..core.exceptions import ConflictError, ValidationError
from .model import ManualEntry, TrackingQuery, clip_note
from .repository import TimeTrackingRepository

log = logging.getLogger(__name__)


class TimeTrackingService:
    def __init__(self, entries: TimeTrackingRepository, *, uuid_factory: Optional[Callable[[], str]] = None):
        self._entries = entries
        self._uuid_factory = uuid_factory or (lambda: str(uuid_lib.uuid4()))

    def list_entries(self, query: TrackingQuery) -> Sequence[dict]:
        return self._entries.list_entries(query)

    def metrics(self, query: TrackingQuery) -> Sequence[dict]:
        return self._entries.list_metrics(query)

    def create_manual(self, entry: ManualEntry) -> dict:
        if entry.duration_minutes > MAX_TRACKED_DURATION_MINUTES:
            raise ValidationError(f"Entries longer than {MAX_TRACKED_DURATION_MINUTES} minutes must be split")
        if self._entries.find_overlap(entry) is not None:
            raise ConflictError("Time range overlaps an existing entry.")
        uuid = self._uuid_factory()
        entry_id = self._entries.insert_manual(uuid, entry)
        log.info("Manual time entry %s created for user %s", entry_id, entry.user_id)
        return {"id": entry_id, "uuid": uuid}

    def update_note(self, entry_id: int, note: Optional[str]) -> None:
        if entry_id <= 0:
            raise ValidationError("Invalid entry id")
        self._entries.update_note(entry_id, clip_note(note))
