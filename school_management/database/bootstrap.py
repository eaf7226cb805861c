from __future__ import annotations

import logging
from decimal import Decimal

import mysql.connector
from sqlalchemy.engine import make_url
from werkzeug.security import generate_password_hash

from ..core.enums import Role
from ..extensions import db
from ..policies.service import PolicyService
from ..policies.sqlalchemy_repository import SqlAlchemyPolicyRepository
from ..schools.model import School, SchoolClass, Student
from ..teaching.model import TeacherAssignment
from ..users.model import PrincipalProfile, TeacherProfile, User

logger = logging.getLogger(__name__)


def ensure_database_exists(database_uri: str) -> None:
    """Create the MySQL schema named in the URI; other backends are left alone."""
    url = make_url(database_uri)
    if url.get_backend_name() != "mysql":
        return
    conn = mysql.connector.connect(
        host=url.host or "localhost",
        port=url.port or 3306,
        user=url.username,
        password=url.password or "",
        use_pure=True,
    )
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{url.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def init_db(database_uri: str) -> None:
    """Create every table and the global attendance policy. Needs an app context."""
    ensure_database_exists(database_uri)
    db.create_all()
    if PolicyService(SqlAlchemyPolicyRepository()).ensure_default_global_policy():
        logger.info("Created the default global attendance policy")


def _upsert_user(username: str, password: str, role: Role, *, email: str, first_name: str, last_name: str) -> User:
    user = User.query.filter_by(username=username).first()
    if user is None:
        user = User(username=username)
        db.session.add(user)
    user.email = email
    user.password_hash = generate_password_hash(password)
    user.first_name = first_name
    user.last_name = last_name
    user.role = role
    user.active = True
    db.session.flush()
    return user


def _get_or_create(model, defaults: dict | None = None, **lookup):
    row = model.query.filter_by(**lookup).first()
    if row is None:
        row = model(**lookup, **(defaults or {}))
        db.session.add(row)
        db.session.flush()
    return row


def seed_demo_data() -> None:
    """Idempotent demo data: one school, two classes, five students and a user per role."""
    school = _get_or_create(School, {"district": "Central District"}, name="Demo Primary School")
    math_class = _get_or_create(SchoolClass, {"subject": "Mathematics"}, school_id=school.id, name="Class 5A")
    _get_or_create(SchoolClass, {"subject": "English"}, school_id=school.id, name="Class 5B")

    for first, last in (("Anna", "Nguyen"), ("Bao", "Tran"), ("Chi", "Le"), ("Dung", "Pham"), ("Em", "Hoang")):
        _get_or_create(Student, first_name=first, last_name=last, class_id=math_class.id)

    _upsert_user("admin", "admin123", Role.ADMIN, email="admin@example.com", first_name="Admin", last_name="Demo")

    teacher = _upsert_user(
        "teacher1", "teacher123", Role.TEACHER, email="teacher1@example.com", first_name="Linh", last_name="Vo"
    )
    profile = _get_or_create(TeacherProfile, user_id=teacher.id)
    profile.hourly_rate = Decimal("150.00")
    profile.specializations = ["Mathematics"]

    principal = _upsert_user(
        "principal1", "principal123", Role.PRINCIPAL, email="principal1@example.com", first_name="Minh", last_name="Do"
    )
    principal_profile = _get_or_create(PrincipalProfile, {"school_id": school.id}, user_id=principal.id)
    principal_profile.school_id = school.id

    _get_or_create(
        TeacherAssignment,
        {"is_active": True},
        teacher_id=teacher.id,
        school_id=school.id,
        class_id=math_class.id,
    )
    db.session.commit()
    logger.info("Demo data ready")
