from __future__ import annotations

from school_management.core.enums import AttendanceStatus
from school_management.teaching.model import Lesson, StudentAttendance


def test_teacher_sees_own_assignments(teacher_client, ids):
    rows = teacher_client.get("/api/teacher/assignments").get_json()
    assert len(rows) == 1
    assert rows[0]["classId"] == ids["class"]


def test_curriculum_requires_assignment(teacher_client, ids):
    res = teacher_client.post("/api/teacher/curriculum", json={"classId": ids["class"], "title": "Fractions"})
    assert res.status_code == 201

    res = teacher_client.post("/api/teacher/curriculum", json={"classId": ids["other_class"], "title": "Verbs"})
    assert res.status_code == 403

    topics = teacher_client.get(f"/api/teacher/curriculum?classId={ids['class']}").get_json()
    assert [t["title"] for t in topics] == ["Fractions"]
    assert teacher_client.get(f"/api/teacher/curriculum?classId={ids['other_class']}").status_code == 403


def test_record_lesson_with_roll_call(app, teacher_client, ids):
    topic = teacher_client.post("/api/teacher/curriculum", json={"classId": ids["class"], "title": "Decimals"}).get_json()
    s1, s2 = ids["students"][:2]

    res = teacher_client.post(
        "/api/teacher/lessons",
        json={
            "classId": ids["class"],
            "date": "2025-03-05T09:00:00",
            "hoursWorked": 1.5,
            "notes": "Good session",
            "topicIds": [topic["id"]],
            "attendance": {str(s1): "PRESENT", str(s2): "LATE", "99999": "ABSENT"},
        },
    )
    assert res.status_code == 201
    lesson = res.get_json()
    assert lesson["hoursWorked"] == 1.5
    assert [t["title"] for t in lesson["topics"]] == ["Decimals"]
    # The unknown student id is dropped
    assert {a["studentId"] for a in lesson["attendance"]} == {s1, s2}

    with app.app_context():
        statuses = {
            a.student_id: a.status for a in StudentAttendance.query.filter_by(lesson_id=lesson["id"]).all()
        }
        assert statuses == {s1: AttendanceStatus.PRESENT, s2: AttendanceStatus.LATE}
        assert Lesson.query.count() == 1

    assert len(teacher_client.get("/api/teacher/lessons").get_json()) == 1


def test_lesson_validation(teacher_client, ids):
    res = teacher_client.post(
        "/api/teacher/lessons",
        json={"classId": ids["class"], "date": "2025-03-05T09:00:00", "hoursWorked": 0},
    )
    assert res.status_code == 400

    res = teacher_client.post(
        "/api/teacher/lessons",
        json={"classId": ids["other_class"], "date": "2025-03-05T09:00:00", "hoursWorked": 1},
    )
    assert res.status_code == 403

    res = teacher_client.post(
        "/api/teacher/lessons",
        json={"classId": ids["class"], "date": "2025-03-05T09:00:00", "hoursWorked": 1, "attendance": {"1": "SLEEPING"}},
    )
    assert res.status_code == 400
