from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..common.validators import optional_int, positive_int
from ..core.constants import DEFAULT_PROJECT_STATUS_ID


@dataclass(frozen=True)
class TeamMember:
    user_id: int
    role_id: int


@dataclass(frozen=True)
class ProjectTask:
    task_id: int = 0
    task_title: str = ""
    category_id: Optional[int] = None
    role_ids: tuple[int, ...] = ()

    def to_dict(self) -> dict:
        return {
            "taskId": self.task_id,
            "taskTitle": self.task_title,
            "categoryId": self.category_id,
            "rolesId": list(self.role_ids),
        }


@dataclass(frozen=True)
class Project:
    name: str
    type_code: Optional[str] = None
    item_id: Optional[int] = None
    unit_id: Optional[int] = None
    project_status_id: int = DEFAULT_PROJECT_STATUS_ID
    customer_id: Optional[int] = None
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type_code": self.type_code,
            "item_id": self.item_id,
            "unit_id": self.unit_id,
            "project_status_id": self.project_status_id,
            "customer_id": self.customer_id,
        }


@dataclass(frozen=True)
class ProjectDraft:
    """A project with its team and task-role assignments, as submitted by the form."""

    project: Project
    team: tuple[TeamMember, ...] = ()
    tasks: tuple[ProjectTask, ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(cls, payload: dict) -> "ProjectDraft":
        raw = payload.get("project") if isinstance(payload.get("project"), dict) else {}
        project = Project(
            name=str(raw.get("name") or "").strip(),
            type_code=(str(raw.get("type_code")).strip() or None) if raw.get("type_code") else None,
            item_id=optional_int(raw.get("item_id")),
            unit_id=optional_int(raw.get("unit_id")),
            project_status_id=positive_int(raw.get("project_status_id")) or DEFAULT_PROJECT_STATUS_ID,
            customer_id=optional_int(raw.get("customer_id")),
        )

        team = []
        for row in payload.get("team") or []:
            if not isinstance(row, dict):
                continue
            user_id = positive_int(row.get("userId"))
            role_id = positive_int(row.get("roleId"))
            if user_id and role_id:
                team.append(TeamMember(user_id, role_id))

        tasks = []
        for row in payload.get("tasks") or []:
            if not isinstance(row, dict):
                continue
            roles = row.get("rolesId") if isinstance(row.get("rolesId"), list) else []
            tasks.append(
                ProjectTask(
                    task_id=positive_int(row.get("taskId")),
                    task_title=str(row.get("taskTitle") or "").strip(),
                    category_id=optional_int(row.get("categoryId")),
                    role_ids=tuple(r for r in (positive_int(x) for x in roles) if r),
                )
            )
        return cls(project=project, team=tuple(team), tasks=tuple(tasks))
