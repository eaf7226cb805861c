from __future__ import annotations


def _new_user(**overrides):
    payload = {
        "username": "jdoe",
        "email": "jdoe@example.com",
        "password": "secret1",
        "firstName": "Jane",
        "lastName": "Doe",
        "role": "TEACHER",
        "hourlyRate": 120,
        "specializations": ["Science"],
    }
    payload.update(overrides)
    return payload


def test_create_update_delete_user(admin_client):
    res = admin_client.post("/api/admin/users", json=_new_user())
    assert res.status_code == 201
    user = res.get_json()
    assert user["email"] == "jdoe@example.com"
    assert user["teacherProfile"]["hourlyRate"] == 120.0

    res = admin_client.put(f"/api/admin/users/{user['id']}", json={"lastName": "Smith", "hourlyRate": 130})
    assert res.status_code == 200
    assert res.get_json()["lastName"] == "Smith"
    assert res.get_json()["teacherProfile"]["hourlyRate"] == 130.0

    assert admin_client.delete(f"/api/admin/users/{user['id']}").status_code == 200
    assert admin_client.get(f"/api/admin/users/{user['id']}").status_code == 404


def test_duplicate_user_is_rejected(admin_client):
    assert admin_client.post("/api/admin/users", json=_new_user()).status_code == 201
    res = admin_client.post("/api/admin/users", json=_new_user(email="other@example.com"))
    assert res.status_code == 400
    assert res.get_json()["error"] == "Username or email already exists"


def test_invalid_email_is_rejected(admin_client):
    res = admin_client.post("/api/admin/users", json=_new_user(email="not-an-email"))
    assert res.status_code == 400
    assert "email" in res.get_json()["error"]


def test_principal_needs_existing_school(admin_client, ids):
    res = admin_client.post(
        "/api/admin/users",
        json=_new_user(username="p2", email="p2@example.com", role="PRINCIPAL", schoolId=9999),
    )
    assert res.status_code == 404

    res = admin_client.post(
        "/api/admin/users",
        json=_new_user(username="p2", email="p2@example.com", role="PRINCIPAL", schoolId=ids["school"]),
    )
    assert res.status_code == 201
    assert res.get_json()["principalProfile"]["schoolId"] == ids["school"]


def test_create_teacher_conflicts(admin_client):
    payload = {
        "firstName": "Tom",
        "lastName": "Tran",
        "email": "tom@example.com",
        "username": "ttran",
        "password": "secret1",
        "hourlyRate": 90,
        "specializations": ["History"],
    }
    assert admin_client.post("/api/teachers", json=payload).status_code == 201
    assert admin_client.post("/api/teachers", json={**payload, "username": "other"}).status_code == 409
    assert admin_client.post("/api/teachers", json={**payload, "email": "x@example.com"}).status_code == 409
    assert admin_client.post("/api/teachers", json={**payload, "specializations": []}).status_code == 400

    teachers = admin_client.get("/api/teachers").get_json()
    assert {t["username"] for t in teachers} == {"teacher1", "ttran"}


def test_bulk_create_reports_each_item(admin_client):
    res = admin_client.post(
        "/api/admin/users/bulk",
        json={
            "operation": "create",
            "users": [
                {"email": " A@Example.com ", "name": "Ann Lee"},
                {"email": "bad-email"},
                {"email": "admin@example.com"},
            ],
        },
    )
    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] == 1
    assert body["failed"] == 2
    assert body["details"][0]["action"] == "created"
    assert len(body["errors"]) == 2
    assert body["details"][0]["email"] == "a@example.com"
    assert "not a valid email address" in body["errors"][0]

    users = admin_client.get("/api/admin/users").get_json()
    created = next(u for u in users if u["email"] == "a@example.com")
    assert created["firstName"] == "Ann"
    assert created["lastName"] == "Lee"
    assert created["username"] == "a@example.com"


def test_bulk_deactivate_and_invalid_operation(admin_client, ids):
    res = admin_client.post(
        "/api/admin/users/bulk",
        json={"operation": "deactivate", "users": [{"id": ids["teacher"]}, {"id": 9999}]},
    )
    body = res.get_json()
    assert body["success"] == 1
    assert body["failed"] == 1
    assert admin_client.get(f"/api/admin/users/{ids['teacher']}").get_json()["isActive"] is False

    res = admin_client.post("/api/admin/users/bulk", json={"operation": "explode", "users": [{"id": 1}]})
    assert res.status_code == 400
    assert res.get_json()["error"] == "Invalid operation"

    res = admin_client.post("/api/admin/users/bulk", json={"operation": "delete", "users": []})
    assert res.status_code == 400


def test_teacher_with_assignments_cannot_be_deleted(admin_client, ids):
    res = admin_client.delete(f"/api/admin/users/{ids['teacher']}")
    assert res.status_code == 409
    assert "deactivate" in res.get_json()["error"]
    assert admin_client.get(f"/api/admin/users/{ids['teacher']}").status_code == 200

    res = admin_client.post("/api/admin/users/bulk", json={"operation": "delete", "users": [{"id": ids["teacher"]}]})
    body = res.get_json()
    assert body["success"] == 0
    assert body["failed"] == 1
    assert "teaching records" in body["errors"][0]
