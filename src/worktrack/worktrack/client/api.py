"""HTTP client for the desktop facade (``/api/desktop/*``)."""
from __future__ import annotations

import logging
import os
from typing import Any, Optional

import requests

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000/api"


class BackendError(Exception):
    def __init__(self, status_code: int, body: str):
        super().__init__(f"{status_code}: {body}")
        self.status_code = status_code
        self.body = body


class BackendApi:
    def __init__(self, base_url: Optional[str] = None, *, session: Optional[requests.Session] = None, timeout: float = 20):
        self.base_url = str(base_url or os.getenv("BACKEND_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout
        self._token: Optional[str] = None
        self._bootstrap: Optional[dict] = None

    @property
    def access_token(self) -> Optional[str]:
        return self._token

    def set_access_token(self, token: Optional[str]) -> None:
        self._token = str(token or "").strip() or None

    def clear_bootstrap_cache(self) -> None:
        self._bootstrap = None

    def request(self, method: str, path: str, *, params: Optional[dict] = None, json: Any = None) -> Any:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        resp = self._session.request(
            method, f"{self.base_url}{path}", params=params, json=json, headers=headers, timeout=self._timeout
        )
        if not resp.ok:
            if resp.status_code == 401:
                # Local auth state follows the server's.
                self.set_access_token(None)
                self.clear_bootstrap_cache()
            raise BackendError(resp.status_code, resp.text)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # Auth and bootstrap

    def login_by_authcode(self, code: str) -> Optional[dict]:
        user = self.request("POST", "/desktop/login-authcode", json={"code": code})
        self.set_access_token(user.get("accessToken") if isinstance(user, dict) else None)
        self.clear_bootstrap_cache()
        return user

    def bootstrap(self) -> dict:
        if self._bootstrap is None:
            self._bootstrap = self.request("GET", "/desktop/bootstrap") or {}
        return self._bootstrap

    def dataset(self, name: str) -> list:
        return list(self.bootstrap().get(name) or [])

    # Task data and availability

    def project_task_data(self, project_id: int, task_id: int) -> list:
        return self.request("GET", "/desktop/project-task-data", params={"projectId": project_id, "taskId": task_id})

    def save_task_data(self, *, project_id: int, task_id: int, data_def_id: int, value_type: str, value: Any) -> dict:
        return self.request(
            "POST",
            "/desktop/task-data",
            json={
                "projectId": project_id,
                "taskId": task_id,
                "dataDefId": data_def_id,
                "valueType": value_type,
                "value": value,
            },
        )

    def available_tasks(self, user_id: int, project_id: int) -> list:
        return self.request("GET", "/desktop/available-tasks", params={"userId": user_id, "projectId": project_id})

    # Items

    def project_items(self, project_id: int, project_type_id: int = 0) -> list:
        return self.request(
            "GET", "/desktop/project-items", params={"projectId": project_id, "projectTypeId": project_type_id}
        )

    def item_tracking_tasks(self, project_id: int) -> list:
        return self.request("GET", "/desktop/item-tracking-tasks", params={"projectId": project_id})

    def item_status_rule(self, project_id: int, task_id: int, apply_after_finish: Optional[int] = None) -> Optional[dict]:
        params = {"projectId": project_id, "taskId": task_id}
        if apply_after_finish is not None:
            params["applyAfterFinish"] = apply_after_finish
        return self.request("GET", "/desktop/item-status-rule", params=params)

    def update_item_status(self, item_id: int, status_id: int) -> dict:
        return self.request("POST", "/desktop/item-status", json={"itemId": item_id, "statusId": status_id})

    # Unfinished work and assignments

    def unfinished_tasks(self, user_id: int) -> list:
        return self.request("GET", "/desktop/unfinished-tasks", params={"userId": user_id})

    def assignments(self, user_id: int) -> list:
        return self.request("GET", "/desktop/assignments", params={"userId": user_id})

    def accept_assignment(self, assignment_id: int) -> dict:
        return self.request("POST", "/desktop/assignment-accepted", json={"assignmentId": assignment_id})

    def mark_unfinished_finished(self, *, record_id: Optional[int] = None, uuid: Optional[str] = None) -> dict:
        body = {"uuid": uuid} if uuid else {"recordId": record_id}
        return self.request("POST", "/desktop/unfinished-finished", json=body)

    # Activity lifecycle

    def start_unallocated(self, payload: dict) -> dict:
        return self.request("POST", "/desktop/activities/start-unallocated", json=payload)

    def start_task(self, payload: dict) -> dict:
        return self.request("POST", "/desktop/activities/start-task", json=payload)

    def complete(self, payload: dict) -> dict:
        return self.request("POST", "/desktop/activities/complete", json=payload)
