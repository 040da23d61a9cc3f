from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from ..core.enums import Role
from ..web.request_data import json_body


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    service = container.project_service

    @app.route("/api/projects", methods=["GET"], endpoint="projects_list")
    @guard.require_auth
    def projects_list():
        return jsonify(list(service.list_projects()))

    @app.route("/api/projects/<int:project_id>", methods=["GET"], endpoint="projects_detail")
    @guard.require_auth
    def projects_detail(project_id: int):
        return jsonify(service.get_details(project_id))

    @app.route("/api/projects", methods=["POST"], endpoint="projects_create")
    @guard.require_role(Role.ADMIN)
    def projects_create():
        return jsonify({"id": service.create(json_body())}), 201

    @app.route("/api/projects/<int:project_id>", methods=["PUT"], endpoint="projects_update")
    @guard.require_role(Role.ADMIN)
    def projects_update(project_id: int):
        return jsonify({"id": service.update(project_id, json_body())})
