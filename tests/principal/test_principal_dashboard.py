from __future__ import annotations

from datetime import datetime, timedelta


def test_dashboard_summarises_own_school(client, login, ids):
    login("teacher1")
    lesson_date = (datetime.now() - timedelta(days=1)).replace(microsecond=0).isoformat()
    s1, s2, s3, s4 = ids["students"][:4]
    res = client.post(
        "/api/teacher/lessons",
        json={
            "classId": ids["class"],
            "date": lesson_date,
            "hoursWorked": 2,
            "attendance": {str(s1): "PRESENT", str(s2): "PRESENT", str(s3): "LATE", str(s4): "ABSENT"},
        },
    )
    assert res.status_code == 201

    login("principal1")
    body = client.get("/api/principal/dashboard").get_json()
    assert body["school"]["name"] == "Demo Primary School"
    stats = body["statistics"]
    assert stats["totalClasses"] == 2
    assert stats["totalStudents"] == 5
    assert stats["activeTeachers"] == 1
    # Only PRESENT counts on the dashboard
    assert stats["attendanceRate"] == 50.0
    assert len(body["recentActivity"]["lessons"]) == 1
    assert body["recentActivity"]["lessons"][0]["teacherName"] == "Linh Vo"
    assert body["financial"]["monthlyPayment"] is None
    assert body["financial"]["wages"]["count"] == 0
    by_name = {c["name"]: c for c in body["classes"]}
    assert by_name["Class 5A"]["studentCount"] == 5
    assert by_name["Class 5A"]["teacherCount"] == 1


def test_dashboard_needs_principal_role(admin_client):
    assert admin_client.get("/api/principal/dashboard").status_code == 403
