from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import first_present, normalize_string, positive_int
from ..container import Container
from ..security.guards import current_principal, resolve_scoped_user_id
from ..web.request_data import json_body, query_int

PREFIX = "/api/desktop"


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    desktop = container.desktop_service
    activities = container.activity_service

    def scoped_user(raw) -> int:
        return resolve_scoped_user_id(current_principal(), positive_int(raw))

    def body_user(payload: dict) -> int:
        return scoped_user(first_present(payload, "user_id", "userId"))

    # Public: this is how a desktop client obtains its token.
    @app.route(f"{PREFIX}/login-authcode", methods=["POST"], endpoint="desktop_login_authcode")
    def desktop_login_authcode():
        result = container.auth_service.login_by_authcode(json_body().get("code"))
        return jsonify(result.to_dict() if result else None)

    @app.route(f"{PREFIX}/bootstrap", methods=["GET"], endpoint="desktop_bootstrap")
    @guard.require_auth
    def desktop_bootstrap():
        return jsonify(desktop.bootstrap())

    @app.route(f"{PREFIX}/project-task-data", methods=["GET"], endpoint="desktop_project_task_data")
    @guard.require_auth
    def desktop_project_task_data():
        return jsonify(list(desktop.project_task_data(query_int("projectId"), query_int("taskId"))))

    @app.route(f"{PREFIX}/task-data", methods=["POST"], endpoint="desktop_task_data")
    @guard.require_auth
    def desktop_task_data():
        payload = json_body()
        return jsonify(
            desktop.save_task_data(
                payload,
                project_id=positive_int(payload.get("projectId")),
                task_id=positive_int(payload.get("taskId")),
                data_def_id=positive_int(payload.get("dataDefId")),
            )
        )

    @app.route(f"{PREFIX}/available-tasks", methods=["GET"], endpoint="desktop_available_tasks")
    @guard.require_auth
    def desktop_available_tasks():
        user_id = scoped_user(request.args.get("userId"))
        return jsonify(list(desktop.available_tasks(user_id, query_int("projectId"))))

    @app.route(f"{PREFIX}/project-items", methods=["GET"], endpoint="desktop_project_items")
    @guard.require_auth
    def desktop_project_items():
        return jsonify(list(desktop.project_items(query_int("projectId"), query_int("projectTypeId"))))

    @app.route(f"{PREFIX}/item-tracking-tasks", methods=["GET"], endpoint="desktop_item_tracking_tasks")
    @guard.require_auth
    def desktop_item_tracking_tasks():
        return jsonify(list(desktop.item_tracking_tasks(query_int("projectId"))))

    @app.route(f"{PREFIX}/item-status-rule", methods=["GET"], endpoint="desktop_item_status_rule")
    @guard.require_auth
    def desktop_item_status_rule():
        rule = desktop.item_status_rule(
            query_int("projectId"), query_int("taskId"), request.args.get("applyAfterFinish")
        )
        return jsonify(rule)

    @app.route(f"{PREFIX}/item-status", methods=["POST"], endpoint="desktop_item_status")
    @guard.require_auth
    def desktop_item_status():
        payload = json_body()
        desktop.set_item_status(positive_int(payload.get("itemId")), positive_int(payload.get("statusId")))
        return jsonify({"success": True})

    @app.route(f"{PREFIX}/unfinished-tasks", methods=["GET"], endpoint="desktop_unfinished_tasks")
    @guard.require_auth
    def desktop_unfinished_tasks():
        return jsonify(list(desktop.unfinished_tasks(scoped_user(request.args.get("userId")))))

    @app.route(f"{PREFIX}/assignments", methods=["GET"], endpoint="desktop_assignments")
    @guard.require_auth
    def desktop_assignments():
        return jsonify(list(desktop.assignments(scoped_user(request.args.get("userId")))))

    @app.route(f"{PREFIX}/assignment-accepted", methods=["POST"], endpoint="desktop_assignment_accepted")
    @guard.require_auth
    def desktop_assignment_accepted():
        desktop.accept_assignment(positive_int(json_body().get("assignmentId")))
        return jsonify({"success": True})

    @app.route(f"{PREFIX}/unfinished-finished", methods=["POST"], endpoint="desktop_unfinished_finished")
    @guard.require_auth
    def desktop_unfinished_finished():
        payload = json_body()
        desktop.mark_unfinished_finished(
            uuid=normalize_string(payload.get("uuid")),
            record_id=positive_int(payload.get("recordId")),
        )
        return jsonify({"success": True})

    @app.route(f"{PREFIX}/activities/start-unallocated", methods=["POST"], endpoint="desktop_start_unallocated")
    @guard.require_auth
    def desktop_start_unallocated():
        payload = json_body()
        activity = activities.parse_start_unallocated(payload, body_user(payload))
        return jsonify(activities.start(activity).to_dict())

    @app.route(f"{PREFIX}/activities/start-task", methods=["POST"], endpoint="desktop_start_task")
    @guard.require_auth
    def desktop_start_task():
        payload = json_body()
        activity = activities.parse_start_task(payload, body_user(payload))
        return jsonify(activities.start(activity).to_dict())

    @app.route(f"{PREFIX}/activities/complete", methods=["POST"], endpoint="desktop_complete")
    @guard.require_auth
    def desktop_complete():
        payload = json_body()
        command = activities.parse_complete(payload, body_user(payload))
        return jsonify(activities.complete(command).to_dict())
