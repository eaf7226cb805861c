from __future__ import annotations

from flask import Flask, jsonify
from flask_login import current_user

from ..common.auth import admin_required
from ..common.schemas import parse_body, query_optional_int
from ..container import Container
from .schemas import ClassCreate, SchoolCreate, StudentCreate


def register(app: Flask, container: Container) -> None:
    service = container.school_service

    @app.get("/api/schools", endpoint="api_schools_list")
    @admin_required
    def list_schools():
        return jsonify([s.to_dict(with_classes=True) for s in service.list_schools()])

    @app.post("/api/schools", endpoint="api_schools_create")
    @admin_required
    def create_school():
        data = parse_body(SchoolCreate)
        school = service.create_school(data, actor_id=current_user.id)
        return jsonify(school.to_dict()), 201

    @app.get("/api/admin/schools", endpoint="api_admin_schools_list")
    @admin_required
    def list_active_schools():
        return jsonify([s.to_dict() for s in service.list_active_schools()])

    @app.post("/api/admin/schools", endpoint="api_admin_schools_create")
    @admin_required
    def admin_create_school():
        data = parse_body(SchoolCreate)
        school = service.create_school(data, actor_id=current_user.id)
        return jsonify(school.to_dict()), 201

    @app.get("/api/classes", endpoint="api_classes_list")
    @admin_required
    def list_classes():
        classes = service.list_classes(school_id=query_optional_int("schoolId"))
        return jsonify([c.to_dict(with_school=True) for c in classes])

    @app.post("/api/classes", endpoint="api_classes_create")
    @admin_required
    def create_class():
        data = parse_body(ClassCreate)
        school_class = service.create_class(data, actor_id=current_user.id)
        return jsonify(school_class.to_dict(with_school=True)), 201

    @app.get("/api/students", endpoint="api_students_list")
    @admin_required
    def list_students():
        students = service.list_students(class_id=query_optional_int("classId"))
        return jsonify([s.to_dict(with_class=True) for s in students])

    @app.post("/api/students", endpoint="api_students_create")
    @admin_required
    def create_student():
        data = parse_body(StudentCreate)
        student = service.create_student(data, actor_id=current_user.id)
        return jsonify(student.to_dict(with_class=True)), 201
