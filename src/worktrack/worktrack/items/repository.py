from __future__ import annotations

from typing import Protocol, Sequence

from .model import CreatedItem, ItemBatchRequest


class ItemRepository(Protocol):
    def list_by_project(self, project_id: int) -> Sequence[dict]:
        raise NotImplementedError

    def create_batch(self, request: ItemBatchRequest) -> Sequence[CreatedItem]:
        raise NotImplementedError
