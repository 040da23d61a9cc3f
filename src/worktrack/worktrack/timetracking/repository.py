from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ManualEntry, TrackingQuery


class TimeTrackingRepository(Protocol):
    def list_entries(self, query: TrackingQuery) -> Sequence[dict]:
        raise NotImplementedError

    def list_metrics(self, query: TrackingQuery) -> Sequence[dict]:
        raise NotImplementedError

    def find_overlap(self, entry: ManualEntry) -> Optional[int]:
        raise NotImplementedError

    def insert_manual(self, uuid: str, entry: ManualEntry) -> int:
        raise NotImplementedError

    def update_note(self, entry_id: int, note: Optional[str]) -> None:
        raise NotImplementedError
