from school_management.core.enums import Role
from school_management.database.bootstrap import ensure_database_exists, seed_demo_data
from school_management.schools.model import School, Student
from school_management.teaching.model import TeacherAssignment
from school_management.users.model import User


def test_seed_is_idempotent(ctx):
    seed_demo_data()
    assert User.query.count() == 3
    assert School.query.count() == 1
    assert Student.query.count() == 5
    assert TeacherAssignment.query.count() == 1

    teacher = User.query.filter_by(username="teacher1").one()
    assert teacher.role == Role.TEACHER
    assert float(teacher.teacher_profile.hourly_rate) == 150.0
    principal = User.query.filter_by(username="principal1").one()
    assert principal.principal_profile.school.name == "Demo Primary School"


def test_non_mysql_databases_are_left_alone():
    # Must not try to open a MySQL connection
    ensure_database_exists("sqlite://")
