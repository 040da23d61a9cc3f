from __future__ import annotations

from dataclasses import replace

from flask import Flask, jsonify, request

from ..container import Container
from ..core.enums import Role
from ..security.guards import current_principal, resolve_scoped_user_id
from ..web.request_data import json_body
from .model import ManualEntry, TrackingQuery


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    service = container.time_tracking_service

    def scoped_query() -> TrackingQuery:
        query = TrackingQuery.from_args(request.args)
        return replace(query, user_id=resolve_scoped_user_id(current_principal(), query.user_id))

    @app.route("/api/time-tracking", methods=["GET"], endpoint="time_tracking_list")
    @guard.require_auth
    def time_tracking_list():
        return jsonify(list(service.list_entries(scoped_query())))

    @app.route("/api/time-tracking/metrics", methods=["GET"], endpoint="time_tracking_metrics")
    @guard.require_auth
    def time_tracking_metrics():
        return jsonify(list(service.metrics(scoped_query())))

    @app.route("/api/time-tracking", methods=["POST"], endpoint="time_tracking_create")
    @guard.require_role(Role.ADMIN)
    def time_tracking_create():
        entry = ManualEntry.from_payload(json_body())
        return jsonify(service.create_manual(entry)), 201

    @app.route("/api/time-tracking/<int:entry_id>/note", methods=["PUT"], endpoint="time_tracking_note")
    @guard.require_role(Role.ADMIN)
    def time_tracking_note(entry_id: int):
        service.update_note(entry_id, json_body().get("note"))
        return jsonify({"success": True})
