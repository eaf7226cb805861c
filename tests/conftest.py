from __future__ import annotations

import os
import tempfile

import pytest

# Must be set before config.testing is imported by create_app
os.environ.setdefault("BACKUP_DIR", tempfile.mkdtemp(prefix="school-backups-"))

from school_management import create_app
from school_management.database.bootstrap import seed_demo_data
from school_management.extensions import db
from school_management.schools.model import School, SchoolClass, Student
from school_management.users.model import User


@pytest.fixture
def app():
    app = create_app("config.testing")
    with app.app_context():
        seed_demo_data()
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def container(app):
    return app.extensions["container"]


@pytest.fixture
def ids(app):
    """Primary keys of the demo data."""
    with app.app_context():
        math_class = SchoolClass.query.filter_by(name="Class 5A").one()
        return {
            "admin": User.query.filter_by(username="admin").one().id,
            "teacher": User.query.filter_by(username="teacher1").one().id,
            "principal": User.query.filter_by(username="principal1").one().id,
            "school": School.query.filter_by(name="Demo Primary School").one().id,
            "class": math_class.id,
            "other_class": SchoolClass.query.filter_by(name="Class 5B").one().id,
            "students": [s.id for s in Student.query.filter_by(class_id=math_class.id).order_by(Student.id)],
        }


PASSWORDS = {"admin": "admin123", "teacher1": "teacher123", "principal1": "principal123"}


def _login(client, username: str, password: str | None = None):
    return client.post(
        "/api/auth/login",
        json={"username": username, "password": password or PASSWORDS[username]},
    )


@pytest.fixture
def admin_client(client):
    assert _login(client, "admin").status_code == 200
    return client


@pytest.fixture
def teacher_client(client):
    assert _login(client, "teacher1").status_code == 200
    return client


@pytest.fixture
def principal_client(client):
    assert _login(client, "principal1").status_code == 200
    return client


@pytest.fixture
def login(client):
    """Sign the test client in as one of the demo users."""

    def _as(username: str, password: str | None = None):
        return _login(client, username, password)

    return _as
