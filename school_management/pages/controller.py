from __future__ import annotations

from flask import Flask, redirect, render_template, url_for
from flask_login import current_user

from ..container import Container
from ..core.enums import Role
from ..core.exceptions import NotFoundError
from ..finance.model import SchoolPayment, TeacherWageRecord
from ..schools.model import School, SchoolClass, Student
from ..users.controller import HOME_BY_ROLE
from ..users.model import User


def register(app: Flask, container: Container) -> None:
    @app.route("/", endpoint="index")
    def index():
        if current_user.is_authenticated:
            return redirect(HOME_BY_ROLE[current_user.role])
        return redirect(url_for("sign_in"))

    @app.route("/unauthorized", endpoint="unauthorized")
    def unauthorized():
        return render_template("unauthorized.html"), 403

    @app.route("/admin/dashboard", endpoint="admin_dashboard")
    def admin_dashboard():
        stats = {
            "schools": School.query.filter_by(is_active=True).count(),
            "classes": SchoolClass.query.filter_by(is_active=True).count(),
            "students": Student.query.filter_by(is_active=True).count(),
            "teachers": User.query.filter_by(role=Role.TEACHER, active=True).count(),
            "pending_wages": TeacherWageRecord.query.filter(TeacherWageRecord.paid_amount < TeacherWageRecord.total_amount).count(),
            "payments": SchoolPayment.query.count(),
        }
        return render_template("admin/dashboard.html", stats=stats)

    @app.route("/teacher/dashboard", endpoint="teacher_dashboard")
    def teacher_dashboard():
        teaching = container.teaching_service
        assignments = teaching.active_assignments(current_user)
        lessons = teaching.lessons(current_user)[:10]
        return render_template("teacher/dashboard.html", assignments=assignments, lessons=lessons)

    @app.route("/principal", endpoint="principal_dashboard")
    def principal_dashboard():
        try:
            data = container.principal_dashboard_service.build(current_user)
        except NotFoundError as e:
            return render_template("principal/dashboard.html", data=None, error=str(e))
        return render_template("principal/dashboard.html", data=data, error=None)
