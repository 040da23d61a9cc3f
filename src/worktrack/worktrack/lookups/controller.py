from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    service = container.lookup_service

    @app.route("/api/lookups/project-form", methods=["GET"], endpoint="lookups_project_form")
    @guard.require_auth
    def lookups_project_form():
        return jsonify(service.project_form())

    @app.route("/api/lookups/task-categories", methods=["GET"], endpoint="lookups_task_categories")
    @guard.require_auth
    def lookups_task_categories():
        return jsonify(list(service.task_categories()))
