from __future__ import annotations

from school_management.core.enums import PolicyScope
from school_management.policies.model import AttendancePolicy


def _payload(**overrides):
    payload = {
        "name": "School rule",
        "scope": "SCHOOL",
        "concernThreshold": 70,
        "lateToleranceMinutes": 10,
        "maxAbsences": 12,
        "autoExcuseEnabled": True,
        "autoExcuseReasons": ["Illness"],
    }
    payload.update(overrides)
    return payload


def test_global_policy_created_on_init(app):
    with app.app_context():
        policies = AttendancePolicy.query.filter_by(scope=PolicyScope.GLOBAL, is_active=True).all()
        assert len(policies) == 1
        assert policies[0].concern_threshold == 80


def test_effective_policy_endpoint(client, login, ids):
    login("admin")
    res = client.post("/api/admin/attendance-policies", json=_payload(schoolId=ids["school"]))
    assert res.status_code == 201
    created = res.get_json()
    assert created["autoExcuseReasons"] == ["illness"]
    assert created["school"]["name"] == "Demo Primary School"

    login("teacher1")
    effective = client.get(f"/api/attendance-policies/effective?classId={ids['class']}&schoolId={ids['school']}")
    assert effective.status_code == 200
    assert effective.get_json()["id"] == created["id"]

    global_policy = client.get("/api/attendance-policies/effective").get_json()
    assert global_policy["scope"] == "GLOBAL"
    assert global_policy["concernThreshold"] == 80


def test_new_policy_closes_previous_open_ended_one(admin_client, ids):
    first = admin_client.post("/api/admin/attendance-policies", json=_payload(schoolId=ids["school"])).get_json()
    second = admin_client.post(
        "/api/admin/attendance-policies", json=_payload(schoolId=ids["school"], concernThreshold=60)
    ).get_json()

    first = admin_client.get(f"/api/admin/attendance-policies/{first['id']}").get_json()
    assert first["effectiveTo"] is not None
    assert second["effectiveTo"] is None


def test_policy_validation(admin_client, ids):
    assert admin_client.post("/api/admin/attendance-policies", json=_payload()).status_code == 400
    assert admin_client.post(
        "/api/admin/attendance-policies", json=_payload(schoolId=ids["school"], concernThreshold=0)
    ).status_code == 400
    assert admin_client.post(
        "/api/admin/attendance-policies", json=_payload(scope="GLOBAL", schoolId=ids["school"])
    ).status_code == 400
    assert admin_client.get("/api/admin/attendance-policies/9999").status_code == 404


def test_update_and_deactivate(admin_client, ids):
    policy = admin_client.post("/api/admin/attendance-policies", json=_payload(schoolId=ids["school"])).get_json()

    res = admin_client.put(f"/api/admin/attendance-policies/{policy['id']}", json={"maxAbsences": 5})
    assert res.get_json()["maxAbsences"] == 5

    assert admin_client.delete(f"/api/admin/attendance-policies/{policy['id']}").status_code == 200
    stored = admin_client.get(f"/api/admin/attendance-policies/{policy['id']}").get_json()
    assert stored["isActive"] is False
    assert stored["effectiveTo"] is not None
