from __future__ import annotations

from flask import Flask, jsonify, request
from flask_login import current_user

from ..common.auth import admin_required
from ..common.datetime_utils import parse_optional_datetime
from ..common.schemas import parse_body, query_int, query_optional_int
from ..container import Container
from ..core import constants
from ..core.enums import AuditAction, AuditSeverity
from ..core.exceptions import ValidationError
from .audit import AuditFilters
from .schemas import AuditSummaryRequest, BackupRequest, ConfigurationCreate, ConfigurationUpdate


def _enum_arg(name: str, enum_cls):
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        raise ValidationError(f"Invalid {name}")


def _datetime_arg(name: str):
    try:
        return parse_optional_datetime(request.args.get(name))
    except ValueError:
        raise ValidationError(f"Invalid {name}")


def register(app: Flask, container: Container) -> None:
    audit = container.audit_service
    configuration = container.configuration_service
    backups = container.backup_service
    metrics = container.metrics_service
    health = container.health_service

    @app.get("/api/health", endpoint="api_health")
    def health_check():
        payload, status = health.check()
        return jsonify(payload), status

    # Audit trail

    @app.get("/api/admin/audit-logs", endpoint="api_audit_logs")
    @admin_required
    def audit_logs():
        filters = AuditFilters(
            user_id=query_optional_int("userId"),
            action=_enum_arg("action", AuditAction),
            entity_type=request.args.get("entityType") or None,
            entity_id=request.args.get("entityId") or None,
            severity=_enum_arg("severity", AuditSeverity),
            start_date=_datetime_arg("startDate"),
            end_date=_datetime_arg("endDate"),
            page=query_int("page", 1),
            limit=query_int("limit", constants.AUDIT_PAGE_SIZE),
        )
        return jsonify(audit.get_logs(filters))

    @app.post("/api/admin/audit-logs", endpoint="api_audit_summary")
    @admin_required
    def audit_summary():
        data = parse_body(AuditSummaryRequest)
        return jsonify(audit.get_summary(data.start_date, data.end_date))

    # Runtime configuration

    @app.get("/api/admin/configurations", endpoint="api_configurations_list")
    @admin_required
    def list_configurations():
        rows = configuration.list_configurations()
        return jsonify([r.to_dict(mask_sensitive=True) for r in rows])

    @app.post("/api/admin/configurations", endpoint="api_configurations_create")
    @admin_required
    def create_configuration():
        data = parse_body(ConfigurationCreate)
        return jsonify(configuration.create_configuration(data, actor_id=current_user.id).to_dict(mask_sensitive=True)), 201

    @app.get("/api/admin/configurations/<int:config_id>", endpoint="api_configurations_get")
    @admin_required
    def get_configuration(config_id: int):
        return jsonify(configuration.get_configuration(config_id).to_dict(mask_sensitive=True))

    @app.put("/api/admin/configurations/<int:config_id>", endpoint="api_configurations_update")
    @admin_required
    def update_configuration(config_id: int):
        data = parse_body(ConfigurationUpdate)
        row = configuration.update_configuration(config_id, data, actor_id=current_user.id)
        return jsonify(row.to_dict(mask_sensitive=True))

    @app.delete("/api/admin/configurations/<int:config_id>", endpoint="api_configurations_delete")
    @admin_required
    def delete_configuration(config_id: int):
        configuration.delete_configuration(config_id, actor_id=current_user.id)
        return jsonify({"message": "Configuration deleted successfully"})

    # Backups

    @app.get("/api/admin/backup", endpoint="api_backups_list")
    @admin_required
    def list_backups():
        return jsonify(
            backups.list_backups(page=query_int("page", 1), limit=query_int("limit", constants.BACKUP_PAGE_SIZE))
        )

    @app.post("/api/admin/backup", endpoint="api_backups_create")
    @admin_required
    def create_backup():
        data = parse_body(BackupRequest)
        record = backups.create_backup(data, user_id=current_user.id)
        return jsonify({"message": "Backup created successfully", "backup": record.to_dict()}), 201

    @app.put("/api/admin/backup/<int:backup_id>", endpoint="api_backups_restore")
    @admin_required
    def restore_backup(backup_id: int):
        backups.restore_backup(backup_id, user_id=current_user.id)
        return jsonify({"message": "Backup restored successfully"})

    @app.delete("/api/admin/backup/<int:backup_id>", endpoint="api_backups_delete")
    @admin_required
    def delete_backup(backup_id: int):
        backups.delete_backup(backup_id, user_id=current_user.id)
        return jsonify({"message": "Backup deleted successfully"})

    # Metrics

    @app.get("/api/admin/system/metrics", endpoint="api_system_metrics")
    @admin_required
    def system_metrics():
        action = request.args.get("action")
        if action == "current":
            return jsonify(metrics.collect())
        if action == "history":
            return jsonify(metrics.history(query_int("hours", constants.METRICS_HISTORY_HOURS)))
        raise ValidationError("Invalid action")
