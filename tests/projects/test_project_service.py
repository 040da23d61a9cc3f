from __future__ import annotations

import pytest

from src.worktrack.worktrack.core.exceptions import NotFoundError, ValidationError
from src.worktrack.worktrack.projects.model import Project, ProjectDraft, ProjectTask, TeamMember
from src.worktrack.worktrack.projects.service import ProjectService


class InMemoryProjects:
    def __init__(self):
        self.projects: dict[int, ProjectDraft] = {}

    def list_all(self):
        return [d.project.to_dict() for d in self.projects.values()]

    def get(self, project_id):
        draft = self.projects.get(project_id)
        return draft.project if draft else None

    def get_team(self, project_id):
        return self.projects[project_id].team

    def get_tasks(self, project_id):
        return self.projects[project_id].tasks

    def create(self, draft):
        new_id = len(self.projects) + 1
        self.projects[new_id] = draft
        return new_id

    def update(self, project_id, draft):
        self.projects[project_id] = draft


PAYLOAD = {
    "project": {"name": " Atlas ", "type_code": "CFS", "item_id": "2", "project_status_id": "x"},
    "team": [{"userId": 7, "roleId": 1}, {"userId": 0, "roleId": 1}, "junk"],
    "tasks": [
        {"taskId": 3, "rolesId": [1, "2", 0]},
        {"taskTitle": "Scan", "categoryId": 4, "rolesId": "bad"},
    ],
}


def test_draft_from_payload():
    draft = ProjectDraft.from_payload(PAYLOAD)

    assert draft.project == Project(name="Atlas", type_code="CFS", item_id=2, project_status_id=1)
    assert draft.team == (TeamMember(7, 1),)
    assert draft.tasks == (
        ProjectTask(task_id=3, role_ids=(1, 2)),
        ProjectTask(task_title="Scan", category_id=4),
    )


def test_create_and_details():
    service = ProjectService(InMemoryProjects())

    project_id = service.create(PAYLOAD)
    details = service.get_details(project_id)

    assert details["project"]["name"] == "Atlas"
    assert details["team"] == [{"userId": 7, "roleId": 1}]
    assert details["tasks"][1] == {"taskId": 0, "taskTitle": "Scan", "categoryId": 4, "rolesId": []}


def test_update_missing_project_is_404_and_name_required():
    service = ProjectService(InMemoryProjects())

    with pytest.raises(NotFoundError):
        service.update(9, PAYLOAD)
    with pytest.raises(ValidationError):
        service.create({"project": {"name": "  "}})
    with pytest.raises(NotFoundError):
        service.get_details(9)
