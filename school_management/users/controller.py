from __future__ import annotations

import logging

from flask import Flask, current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_login import current_user, login_user, logout_user

from ..common.auth import admin_required
from ..common.schemas import parse_body
from ..container import Container
from ..core.enums import AuditAction, Role
from ..core.exceptions import AuthenticationError, ValidationError
from .schemas import (
    BulkRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    TeacherCreate,
    UserCreate,
    UserUpdate,
)

logger = logging.getLogger(__name__)

HOME_BY_ROLE = {
    Role.ADMIN: "/admin/dashboard",
    Role.TEACHER: "/teacher/dashboard",
    Role.PRINCIPAL: "/principal",
}

RESET_MESSAGE = "If the address is registered, a password reset link has been sent"


def _safe_callback(url: str | None) -> str | None:
    if url and url.startswith("/") and not url.startswith("//"):
        return url
    return None


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    users = container.user_service
    audit = container.audit_service

    def _login(user) -> None:
        login_user(user)
        audit.log(action=AuditAction.LOGIN, entity_type="user", entity_id=user.id, user_id=user.id)

    # Pages

    @app.route("/auth/sign-in", methods=["GET", "POST"], endpoint="sign_in")
    def sign_in():
        callback = _safe_callback(request.args.get("callbackUrl"))
        if current_user.is_authenticated:
            return redirect(callback or HOME_BY_ROLE[current_user.role])

        if request.method == "POST":
            try:
                user = auth.authenticate(request.form.get("username", ""), request.form.get("password", ""))
                _login(user)
                return redirect(callback or HOME_BY_ROLE[user.role])
            except (AuthenticationError, ValidationError) as e:
                flash(str(e), "danger")

        return render_template("auth/sign_in.html")

    @app.route("/auth/sign-out", endpoint="sign_out")
    def sign_out():
        if current_user.is_authenticated:
            audit.log(action=AuditAction.LOGOUT, entity_type="user", entity_id=current_user.id, user_id=current_user.id)
        logout_user()
        flash("You have been signed out.", "info")
        return redirect(url_for("sign_in"))

    @app.route("/auth/forgot-password", endpoint="forgot_password_page")
    def forgot_password_page():
        return render_template("auth/forgot_password.html")

    @app.route("/auth/reset-password", endpoint="reset_password_page")
    def reset_password_page():
        return render_template("auth/reset_password.html", token=request.args.get("token", ""))

    # Auth API

    @app.post("/api/auth/login", endpoint="api_login")
    def api_login():
        data = parse_body(LoginRequest)
        user = auth.authenticate(data.username, data.password)
        _login(user)
        return jsonify({"user": user.to_dict(), "redirect": HOME_BY_ROLE[user.role]})

    @app.post("/api/auth/logout", endpoint="api_logout")
    def api_logout():
        if current_user.is_authenticated:
            audit.log(action=AuditAction.LOGOUT, entity_type="user", entity_id=current_user.id, user_id=current_user.id)
        logout_user()
        return jsonify({"message": "Signed out"})

    @app.get("/api/auth/session", endpoint="api_session")
    def api_session():
        if not current_user.is_authenticated:
            return jsonify({"user": None})
        return jsonify({"user": current_user.to_dict()})

    @app.post("/api/auth/forgot-password", endpoint="api_forgot_password")
    def api_forgot_password():
        data = parse_body(ForgotPasswordRequest)
        token = container.password_reset_service.create_reset_token(data.email)
        body = {"message": RESET_MESSAGE}
        if token:
            logger.info("Password reset requested for %s", data.email)
            if current_app.config.get("DEBUG"):
                body["debugToken"] = token
        return jsonify(body)

    @app.post("/api/auth/reset-password", endpoint="api_reset_password")
    def api_reset_password():
        data = parse_body(ResetPasswordRequest)
        if not container.password_reset_service.reset_password(data.token, data.password):
            raise ValidationError("Invalid or expired token")
        return jsonify({"message": "Password has been reset"})

    # Admin users

    @app.get("/api/admin/users", endpoint="api_users_list")
    @admin_required
    def list_users():
        return jsonify([u.to_dict() for u in users.list_users()])

    @app.post("/api/admin/users", endpoint="api_users_create")
    @admin_required
    def create_user():
        data = parse_body(UserCreate)
        user = users.create_user(data, actor_id=current_user.id)
        return jsonify(user.to_dict()), 201

    @app.get("/api/admin/users/<int:user_id>", endpoint="api_users_get")
    @admin_required
    def get_user(user_id: int):
        return jsonify(users.get_user(user_id).to_dict())

    @app.put("/api/admin/users/<int:user_id>", endpoint="api_users_update")
    @admin_required
    def update_user(user_id: int):
        data = parse_body(UserUpdate)
        return jsonify(users.update_user(user_id, data, actor_id=current_user.id).to_dict())

    @app.delete("/api/admin/users/<int:user_id>", endpoint="api_users_delete")
    @admin_required
    def delete_user(user_id: int):
        users.delete_user(user_id, actor_id=current_user.id)
        return jsonify({"message": "User deleted"})

    @app.post("/api/admin/users/bulk", endpoint="api_users_bulk")
    @admin_required
    def bulk_users():
        data = parse_body(BulkRequest)
        result = container.bulk_user_service.run(data.operation, data.users, actor_id=current_user.id)
        return jsonify(result.to_dict())

    # Teachers

    @app.get("/api/teachers", endpoint="api_teachers_list")
    @admin_required
    def list_teachers():
        return jsonify([u.to_dict() for u in users.list_teachers()])

    @app.post("/api/teachers", endpoint="api_teachers_create")
    @admin_required
    def create_teacher():
        data = parse_body(TeacherCreate)
        user = users.create_teacher(data, actor_id=current_user.id)
        return jsonify(user.to_dict()), 201
