from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Project, ProjectDraft, ProjectTask, TeamMember


class ProjectRepository(Protocol):
    def list_all(self) -> Sequence[dict]:
        raise NotImplementedError

    def get(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def get_team(self, project_id: int) -> Sequence[TeamMember]:
        raise NotImplementedError

    def get_tasks(self, project_id: int) -> Sequence[ProjectTask]:
        raise NotImplementedError

    def create(self, draft: ProjectDraft) -> int:
        raise NotImplementedError

    def update(self, project_id: int, draft: ProjectDraft) -> None:
        raise NotImplementedError
