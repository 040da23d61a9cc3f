from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from ..core.enums import Role
from ..web.request_data import json_body, query_int


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    service = container.item_service

    @app.route("/api/items", methods=["GET"], endpoint="items_list")
    @guard.require_auth
    def items_list():
        return jsonify(list(service.list_for_project(query_int("projectId"))))

    @app.route("/api/items", methods=["POST"], endpoint="items_create")
    @guard.require_role(Role.ADMIN)
    def items_create():
        items = service.create_batch(json_body())
        return jsonify({"items": [i.to_dict() for i in items]}), 201
