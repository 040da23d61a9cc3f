from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ItemBatchRequest:
    project_id: int
    category_id: Optional[int] = None
    user_id: Optional[int] = None
    count: int = 1


@dataclass(frozen=True)
class CreatedItem:
    id: int
    code: str

    def to_dict(self) -> dict:
        return {"id": self.id, "code": self.code}


def item_label(category_label: str, item_type_name: str, category_sequence: int) -> str:
    return f"{category_label} {item_type_name}{category_sequence}".strip()


def item_code(category_label: str, project_id: int, item_id: int, project_sequence: int, category_sequence: int) -> str:
    """Human-facing item code: ``<category>-<project>.<item>-<projectSeq>-<categorySeq>``."""
    return f"{category_label or 'NA'}-{project_id}.{item_id}-{project_sequence}-{category_sequence}"
