from __future__ import annotations

REPORT_RANGE = {"startDate": "2025-03-01", "endDate": "2025-03-31"}


def _record_march_lessons(client, ids):
    s1, s2, s3 = ids["students"][:3]
    roll_calls = [
        {str(s1): "PRESENT", str(s2): "PRESENT", str(s3): "LATE"},
        {str(s1): "PRESENT", str(s2): "ABSENT", str(s3): "LATE"},
        {str(s1): "PRESENT", str(s2): "ABSENT", str(s3): "LATE"},
    ]
    for day, attendance in zip((3, 10, 17), roll_calls):
        res = client.post(
            "/api/teacher/lessons",
            json={
                "classId": ids["class"],
                "date": f"2025-03-{day:02d}T09:00:00",
                "hoursWorked": 1,
                "attendance": attendance,
            },
        )
        assert res.status_code == 201
    return s1, s2, s3


def test_attendance_report_json(client, login, ids):
    login("teacher1")
    s1, s2, s3 = _record_march_lessons(client, ids)
    login("admin")

    res = client.post("/api/admin/reports/attendance", json=REPORT_RANGE)
    assert res.status_code == 200
    report = res.get_json()

    summary = report["summary"]
    assert summary["totalRecords"] == 9
    assert summary["totalStudents"] == 3
    assert summary["totalClasses"] == 1
    assert summary["totalSchools"] == 1
    assert summary["overallAttendanceRate"] == 77.78

    by_student = {row["student"]["id"]: row for row in report["analytics"]["byStudent"]}
    assert by_student[s1]["attendanceRate"] == 100.0
    assert by_student[s2]["absent"] == 2
    # Late still counts as attended
    assert by_student[s3]["attendanceRate"] == 100.0

    concerns = report["analytics"]["concernStudents"]
    assert [c["student"]["id"] for c in concerns] == [s2]
    assert concerns[0]["concernThreshold"] == 80
    assert summary["studentsWithConcerns"] == 1
    assert len(report["rawData"]) == 9


def test_class_policy_changes_concern_list(client, login, ids):
    login("teacher1")
    _record_march_lessons(client, ids)
    login("admin")

    res = client.post(
        "/api/admin/attendance-policies",
        json={
            "name": "Lenient 5A",
            "scope": "CLASS",
            "schoolId": ids["school"],
            "classId": ids["class"],
            "concernThreshold": 30,
            "lateToleranceMinutes": 10,
            "maxAbsences": 30,
        },
    )
    assert res.status_code == 201

    report = client.post("/api/admin/reports/attendance", json=REPORT_RANGE).get_json()
    assert report["analytics"]["concernStudents"] == []


def test_attendance_report_csv(client, login, ids):
    login("teacher1")
    _record_march_lessons(client, ids)
    login("admin")

    res = client.post("/api/admin/reports/attendance", json={**REPORT_RANGE, "format": "csv"})
    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    assert "attendance-report-2025-03-01-2025-03-31.csv" in res.headers["Content-Disposition"]
    lines = res.get_data(as_text=True).split("\n")
    assert lines[0] == '"Date","Student Name","Class","School","Status","Teacher","Notes"'
    assert len(lines) == 10
    assert '"Linh Vo"' in lines[1]


def test_attendance_report_xlsx(client, login, ids):
    login("admin")
    res = client.post("/api/admin/reports/attendance", json={**REPORT_RANGE, "format": "xlsx"})
    assert res.status_code == 200
    assert res.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    assert res.data[:2] == b"PK"


def test_report_request_validation(admin_client):
    res = admin_client.post("/api/admin/reports/attendance", json={"startDate": "2025-03-31", "endDate": "2025-03-01"})
    assert res.status_code == 400
    res = admin_client.post("/api/admin/reports/attendance", json={**REPORT_RANGE, "format": "pdf"})
    assert res.status_code == 400


def test_teachers_cannot_view_reports(teacher_client):
    assert teacher_client.post("/api/admin/reports/attendance", json=REPORT_RANGE).status_code == 403
