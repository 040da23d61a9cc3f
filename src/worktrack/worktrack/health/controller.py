from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.health_service
    lifecycle = container.lifecycle

    @app.before_request
    def track_in_flight():
        lifecycle.request_started()

    @app.teardown_request
    def release_in_flight(_exc=None):
        lifecycle.request_finished()

    @app.route("/health/live", methods=["GET"], endpoint="health_live")
    def health_live():
        return jsonify(service.liveness())

    @app.route("/health/ready", methods=["GET"], endpoint="health_ready")
    def health_ready():
        body, ready = service.readiness()
        return jsonify(body), 200 if ready else 503
