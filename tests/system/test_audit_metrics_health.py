from __future__ import annotations

from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from school_management.core.enums import AuditAction, AuditSeverity
from school_management.extensions import db
from school_management.system.audit import AuditFilters, AuditService
from school_management.system.model import AuditLog, SystemMetric


def test_audit_log_failure_does_not_raise(ctx, ids):
    service = AuditService()
    with patch.object(db.session, "commit", side_effect=OperationalError("INSERT", {}, Exception("down"))):
        assert service.log(action=AuditAction.CREATE, entity_type="school") is None
    assert service.log(action=AuditAction.CREATE, entity_type="school", user_id=ids["admin"]) is not None


def test_audit_listing_filters_and_pages(ctx, ids):
    service = AuditService()
    for i in range(3):
        service.log(action=AuditAction.CREATE, entity_type="school", entity_id=i, user_id=ids["admin"])
    service.log(action=AuditAction.DELETE, entity_type="school", entity_id=1, severity=AuditSeverity.WARNING)

    page = service.get_logs(AuditFilters(action=AuditAction.CREATE, entity_type="school", limit=2))
    assert page["total"] == 3
    assert page["totalPages"] == 2
    assert len(page["logs"]) == 2
    assert page["logs"][0]["user"]["username"] == "admin"

    warnings = service.get_logs(AuditFilters(severity=AuditSeverity.WARNING))
    assert warnings["total"] == 1


def test_audit_summary_groups(ctx, ids):
    service = AuditService()
    service.log(action=AuditAction.CREATE, entity_type="school", user_id=ids["admin"])
    service.log(action=AuditAction.CREATE, entity_type="class", user_id=ids["admin"])
    service.log(action=AuditAction.DELETE, entity_type="class", user_id=ids["teacher"])

    summary = service.get_summary()
    assert summary["totalLogs"] == AuditLog.query.count()
    actions = {row["action"]: row["count"] for row in summary["actionStats"]}
    assert actions[AuditAction.DELETE] == 1
    entities = {row["entityType"]: row["count"] for row in summary["entityStats"]}
    assert entities["class"] == 2
    assert summary["userStats"][0]["userId"] == ids["admin"]


def test_audit_api(client, login):
    login("admin")  # writes a LOGIN entry
    res = client.get("/api/admin/audit-logs?action=LOGIN")
    assert res.status_code == 200
    body = res.get_json()
    assert body["total"] == 1
    assert body["logs"][0]["action"] == "LOGIN"

    assert client.get("/api/admin/audit-logs?action=NOPE").status_code == 400

    summary = client.post("/api/admin/audit-logs", json={}).get_json()
    assert summary["totalLogs"] >= 1


def test_metrics_current_and_history(admin_client, app):
    res = admin_client.get("/api/admin/system/metrics?action=current")
    assert res.status_code == 200
    metrics = res.get_json()
    assert set(metrics) == {"system", "database", "application"}
    assert metrics["system"]["cpu"]["cores"] >= 1
    assert metrics["application"]["requests"]["total"] >= 1

    with app.app_context():
        assert SystemMetric.query.filter_by(name="cpu_usage").count() == 1

    history = admin_client.get("/api/admin/system/metrics?action=history&hours=1").get_json()
    assert len(history) == 1
    assert "cpu_usage" in history[0]["metrics"]

    assert admin_client.get("/api/admin/system/metrics?action=bogus").status_code == 400


def test_health_reports_database_state(client, app):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.get_json()["status"] == "ok"

    with patch.object(db.session, "execute", side_effect=OperationalError("SELECT 1", {}, Exception("down"))):
        res = client.get("/api/health")
    assert res.status_code == 503
    assert res.get_json()["status"] == "unhealthy"
