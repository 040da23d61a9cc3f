from __future__ import annotations

from typing import Any, Sequence

from ..common.validators import optional_int, positive_int
from ..core.exceptions import ValidationError
from ..database.capabilities import OptionalTables
from .model import CreatedItem, ItemBatchRequest
from .repository import ItemRepository


class ItemService:
    def __init__(self, items: ItemRepository, optional: OptionalTables):
        self._items = items
        self._optional = optional

    def list_for_project(self, project_id: int) -> Sequence[dict]:
        if project_id <= 0:
            raise ValidationError("projectId is required")
        if not self._optional.available("items"):
            return []
        return self._items.list_by_project(project_id)

    @staticmethod
    def _parse_count(value: Any) -> int:
        if value is None or value == "":
            return 1
        try:
            count = int(value)
        except (TypeError, ValueError):
            raise ValidationError("count must be at least 1")
        return max(1, count)

    def create_batch(self, payload: dict) -> Sequence[CreatedItem]:
        project_id = positive_int(payload.get("projectId"))
        if not project_id:
            raise ValidationError("projectId is required")
        request = ItemBatchRequest(
            project_id=project_id,
            category_id=optional_int(payload.get("categoryId")),
            user_id=optional_int(payload.get("userId")),
            count=self._parse_count(payload.get("count")),
        )
        return self._items.create_batch(request)
