from __future__ import annotations


def test_create_school_and_duplicates(admin_client):
    res = admin_client.post(
        "/api/admin/schools",
        json={"name": "Riverside High", "district": "North", "logoUrl": "https://example.com/logo.png"},
    )
    assert res.status_code == 201
    assert res.get_json()["logoUrl"] == "https://example.com/logo.png"

    res = admin_client.post("/api/admin/schools", json={"name": "Riverside High", "district": "South"})
    assert res.status_code == 400

    res = admin_client.post("/api/schools", json={"name": "Hill School", "district": "East", "logoUrl": "ftp://x"})
    assert res.status_code == 400

    names = [s["name"] for s in admin_client.get("/api/admin/schools").get_json()]
    assert names == sorted(names)
    assert "Riverside High" in names


def test_schools_list_includes_classes(admin_client):
    schools = admin_client.get("/api/schools").get_json()
    demo = next(s for s in schools if s["name"] == "Demo Primary School")
    assert {c["name"] for c in demo["classes"]} == {"Class 5A", "Class 5B"}


def test_class_rules(admin_client, ids):
    res = admin_client.post("/api/classes", json={"name": "Class 6A", "subject": "Art", "schoolId": ids["school"]})
    assert res.status_code == 201
    assert res.get_json()["school"]["name"] == "Demo Primary School"

    res = admin_client.post("/api/classes", json={"name": "Class 6A", "subject": "Art", "schoolId": ids["school"]})
    assert res.status_code == 409

    res = admin_client.post("/api/classes", json={"name": "Class 6A", "subject": "Art", "schoolId": 9999})
    assert res.status_code == 404

    classes = admin_client.get(f"/api/classes?schoolId={ids['school']}").get_json()
    assert len(classes) == 3


def test_student_rules(admin_client, ids):
    payload = {"firstName": "Zoe", "lastName": "Ng", "classId": ids["class"]}
    assert admin_client.post("/api/students", json=payload).status_code == 201
    assert admin_client.post("/api/students", json=payload).status_code == 409
    assert admin_client.post("/api/students", json={**payload, "classId": 9999}).status_code == 404

    students = admin_client.get(f"/api/students?classId={ids['class']}").get_json()
    assert len(students) == 6


def test_assignment_rules(admin_client, ids):
    res = admin_client.post(
        "/api/teacher-assignments",
        json={"teacherId": ids["teacher"], "schoolId": ids["school"], "classId": ids["class"]},
    )
    assert res.status_code == 409

    res = admin_client.post(
        "/api/teacher-assignments",
        json={"teacherId": ids["admin"], "schoolId": ids["school"], "classId": ids["other_class"]},
    )
    assert res.status_code == 404

    other_school = admin_client.post("/api/admin/schools", json={"name": "Other", "district": "West"}).get_json()
    res = admin_client.post(
        "/api/teacher-assignments",
        json={"teacherId": ids["teacher"], "schoolId": other_school["id"], "classId": ids["other_class"]},
    )
    assert res.status_code == 400

    res = admin_client.post(
        "/api/teacher-assignments",
        json={"teacherId": ids["teacher"], "schoolId": ids["school"], "classId": ids["other_class"]},
    )
    assert res.status_code == 201
    assert len(admin_client.get("/api/teacher-assignments").get_json()) == 2
