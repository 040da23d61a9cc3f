from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from ..core.enums import Role
from ..web.request_data import json_body


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    service = container.customer_service

    @app.route("/api/customers", methods=["GET"], endpoint="customers_list")
    @guard.require_auth
    def customers_list():
        return jsonify([c.to_dict() for c in service.list_customers()])

    @app.route("/api/customers", methods=["POST"], endpoint="customers_create")
    @guard.require_role(Role.ADMIN)
    def customers_create():
        customer = service.create(json_body())
        return jsonify(customer.to_dict()), 201

    @app.route("/api/customers/<int:customer_id>", methods=["PUT"], endpoint="customers_update")
    @guard.require_role(Role.ADMIN)
    def customers_update(customer_id: int):
        customer = service.update(customer_id, json_body())
        return jsonify(customer.to_dict())

    @app.route("/api/customers/<int:customer_id>", methods=["DELETE"], endpoint="customers_delete")
    @guard.require_role(Role.ADMIN)
    def customers_delete(customer_id: int):
        service.delete(customer_id)
        return jsonify({"success": True})
