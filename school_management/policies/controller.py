from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import admin_required, login_required
from ..common.schemas import parse_body, query_optional_int
from ..container import Container
from .schemas import PolicyCreate, PolicyUpdate


def register(app: Flask, container: Container) -> None:
    service = container.policy_service

    @app.get("/api/admin/attendance-policies", endpoint="api_policies_list")
    @admin_required
    def list_policies():
        return jsonify([p.to_dict() for p in service.list_policies()])

    @app.post("/api/admin/attendance-policies", endpoint="api_policies_create")
    @admin_required
    def create_policy():
        data = parse_body(PolicyCreate)
        policy = service.create_policy(data)
        return jsonify(policy.to_dict()), 201

    @app.get("/api/admin/attendance-policies/<int:policy_id>", endpoint="api_policies_get")
    @admin_required
    def get_policy(policy_id: int):
        return jsonify(service.get_policy(policy_id).to_dict())

    @app.put("/api/admin/attendance-policies/<int:policy_id>", endpoint="api_policies_update")
    @admin_required
    def update_policy(policy_id: int):
        data = parse_body(PolicyUpdate)
        return jsonify(service.update_policy(policy_id, data).to_dict())

    @app.delete("/api/admin/attendance-policies/<int:policy_id>", endpoint="api_policies_delete")
    @admin_required
    def delete_policy(policy_id: int):
        service.deactivate_policy(policy_id)
        return jsonify({"message": "Policy deactivated"})

    @app.get("/api/attendance-policies/effective", endpoint="api_policies_effective")
    @login_required
    def effective_policy():
        policy = service.get_effective_policy(
            class_id=query_optional_int("classId"),
            school_id=query_optional_int("schoolId"),
        )
        return jsonify(policy.to_dict())
