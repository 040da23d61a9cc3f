from __future__ import annotations

from typing import Sequence

from ..core.exceptions import NotFoundError, ValidationError
from .model import ProjectDraft
from .repository import ProjectRepository


class ProjectService:
    def __init__(self, projects: ProjectRepository):
        self._projects = projects

    def list_projects(self) -> Sequence[dict]:
        return self._projects.list_all()

    def get_details(self, project_id: int) -> dict:
        if project_id <= 0:
            raise ValidationError("Invalid project id")
        project = self._projects.get(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return {
            "project": project.to_dict(),
            "team": [{"userId": m.user_id, "roleId": m.role_id} for m in self._projects.get_team(project_id)],
            "tasks": [t.to_dict() for t in self._projects.get_tasks(project_id)],
        }

    @staticmethod
    def _parse(payload: dict) -> ProjectDraft:
        draft = ProjectDraft.from_payload(payload)
        if not draft.project.name:
            raise ValidationError("Project name is required")
        return draft

    def create(self, payload: dict) -> int:
        return self._projects.create(self._parse(payload))

    def update(self, project_id: int, payload: dict) -> int:
        if project_id <= 0:
            raise ValidationError("Invalid project id")
        draft = self._parse(payload)
        if self._projects.get(project_id) is None:
            raise NotFoundError("Project not found")
        self._projects.update(project_id, draft)
        return project_id
