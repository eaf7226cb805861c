from __future__ import annotations

from flask import Flask, jsonify
from flask_login import current_user

from ..common.auth import admin_required, teacher_required
from ..common.schemas import parse_body, query_optional_int
from ..container import Container
from .schemas import AssignmentCreate, LessonCreate, TopicCreate


def register(app: Flask, container: Container) -> None:
    assignments = container.assignment_service
    teaching = container.teaching_service

    @app.get("/api/teacher-assignments", endpoint="api_assignments_list")
    @admin_required
    def list_assignments():
        return jsonify([a.to_dict() for a in assignments.list_assignments()])

    @app.post("/api/teacher-assignments", endpoint="api_assignments_create")
    @admin_required
    def create_assignment():
        data = parse_body(AssignmentCreate)
        assignment = assignments.create_assignment(data, actor_id=current_user.id)
        return jsonify(assignment.to_dict()), 201

    @app.get("/api/teacher/assignments", endpoint="api_teacher_assignments")
    @teacher_required
    def my_assignments():
        rows = teaching.active_assignments(current_user)
        return jsonify([a.to_dict(with_students=True) for a in rows])

    @app.get("/api/teacher/curriculum", endpoint="api_teacher_curriculum")
    @teacher_required
    def my_curriculum():
        topics = teaching.curriculum(current_user, class_id=query_optional_int("classId"))
        return jsonify([t.to_dict() for t in topics])

    @app.post("/api/teacher/curriculum", endpoint="api_teacher_curriculum_create")
    @teacher_required
    def create_topic():
        data = parse_body(TopicCreate)
        return jsonify(teaching.create_topic(current_user, data).to_dict()), 201

    @app.get("/api/teacher/lessons", endpoint="api_teacher_lessons")
    @teacher_required
    def my_lessons():
        return jsonify([lesson.to_dict() for lesson in teaching.lessons(current_user)])

    @app.post("/api/teacher/lessons", endpoint="api_teacher_lessons_create")
    @teacher_required
    def record_lesson():
        data = parse_body(LessonCreate)
        lesson = teaching.record_lesson(current_user, data)
        return jsonify(lesson.to_dict()), 201
