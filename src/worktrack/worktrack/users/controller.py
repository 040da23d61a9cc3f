from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from ..core.enums import Role
from ..web.request_data import json_body


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard

    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        payload = json_body()
        result = container.auth_service.login(payload.get("username"), payload.get("password"))
        return jsonify(result.to_dict())

    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @guard.require_role(Role.ADMIN)
    def users_list():
        return jsonify(list(container.user_service.list_users()))
