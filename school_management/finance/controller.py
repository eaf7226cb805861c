from __future__ import annotations

from flask import Flask, jsonify, request
from flask_login import current_user

from ..common.auth import admin_required
from ..common.schemas import parse_body, query_optional_int
from ..container import Container
from ..core.enums import PaymentStatus
from ..core.exceptions import ValidationError
from .schemas import PaymentCreate, PaymentUpdate, WageCalculate, WageUpdate


def _status_arg():
    raw = request.args.get("status")
    if not raw:
        return None
    try:
        return PaymentStatus(raw)
    except ValueError:
        raise ValidationError("Invalid status")


def register(app: Flask, container: Container) -> None:
    wages = container.wage_service
    payments = container.payment_service

    @app.get("/api/admin/finances/wages", endpoint="api_wages_list")
    @admin_required
    def list_wages():
        rows = wages.list_wages(
            month=query_optional_int("month"),
            year=query_optional_int("year"),
            teacher_id=query_optional_int("teacherId"),
        )
        return jsonify([r.to_dict() for r in rows])

    @app.post("/api/admin/finances/wages", endpoint="api_wages_calculate")
    @admin_required
    def calculate_wages():
        data = parse_body(WageCalculate)
        records = wages.calculate(data, actor_id=current_user.id)
        return jsonify(
            {
                "message": f"Wages calculated for {len(records)} teachers",
                "records": [r.to_dict() for r in records],
            }
        )

    @app.put("/api/admin/finances/wages/<int:wage_id>", endpoint="api_wages_update")
    @admin_required
    def update_wage(wage_id: int):
        data = parse_body(WageUpdate)
        return jsonify(wages.update_wage(wage_id, data, actor_id=current_user.id).to_dict())

    @app.delete("/api/admin/finances/wages/<int:wage_id>", endpoint="api_wages_delete")
    @admin_required
    def delete_wage(wage_id: int):
        wages.delete_wage(wage_id, actor_id=current_user.id)
        return jsonify({"message": "Wage record deleted"})

    @app.get("/api/admin/finances/payments", endpoint="api_payments_list")
    @admin_required
    def list_payments():
        rows = payments.list_payments(
            month=query_optional_int("month"),
            year=query_optional_int("year"),
            school_id=query_optional_int("schoolId"),
            status=_status_arg(),
        )
        return jsonify([r.to_dict() for r in rows])

    @app.post("/api/admin/finances/payments", endpoint="api_payments_create")
    @admin_required
    def create_payment():
        data = parse_body(PaymentCreate)
        return jsonify(payments.create_payment(data, actor_id=current_user.id).to_dict()), 201

    @app.put("/api/admin/finances/payments/<int:payment_id>", endpoint="api_payments_update")
    @admin_required
    def update_payment(payment_id: int):
        data = parse_body(PaymentUpdate)
        return jsonify(payments.update_payment(payment_id, data, actor_id=current_user.id).to_dict())

    @app.delete("/api/admin/finances/payments/<int:payment_id>", endpoint="api_payments_delete")
    @admin_required
    def delete_payment(payment_id: int):
        payments.delete_payment(payment_id, actor_id=current_user.id)
        return jsonify({"message": "Payment record deleted"})
