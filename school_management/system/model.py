from __future__ import annotations

from ..common.datetime_utils import now_local
from ..core.enums import AuditAction, AuditSeverity, BackupStatus, ConfigType, MetricType
from ..extensions import db


class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.Enum(AuditAction, native_enum=False, length=30), nullable=False)
    entity_type = db.Column(db.String(100), nullable=False)
    entity_id = db.Column(db.String(100))
    severity = db.Column(db.Enum(AuditSeverity, native_enum=False, length=20), nullable=False, default=AuditSeverity.INFO)
    old_values = db.Column(db.JSON)
    new_values = db.Column(db.JSON)
    # "metadata" is reserved on declarative models
    meta = db.Column("metadata", db.JSON)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    user_agent = db.Column(db.String(500))
    ip_address = db.Column(db.String(64))
    created_at = db.Column(db.DateTime, nullable=False, default=now_local, index=True)

    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.action,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "severity": self.severity,
            "oldValues": self.old_values,
            "newValues": self.new_values,
            "metadata": self.meta,
            "userId": self.user_id,
            "userAgent": self.user_agent,
            "ipAddress": self.ip_address,
            "createdAt": self.created_at,
            "user": {
                "id": self.user.id,
                "username": self.user.username,
                "email": self.user.email,
                "firstName": self.user.first_name,
                "lastName": self.user.last_name,
            } if self.user else None,
        }


class SystemConfiguration(db.Model):
    __tablename__ = "system_configurations"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(200), unique=True, nullable=False)
    value = db.Column(db.Text, nullable=False)
    type = db.Column(db.Enum(ConfigType, native_enum=False, length=20), nullable=False, default=ConfigType.STRING)
    description = db.Column(db.Text)
    category = db.Column(db.String(100), nullable=False)
    is_sensitive = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=now_local)
    updated_at = db.Column(db.DateTime, nullable=False, default=now_local, onupdate=now_local)

    def to_dict(self, *, mask_sensitive: bool = False) -> dict:
        return {
            "id": self.id,
            "key": self.key,
            "value": "********" if (mask_sensitive and self.is_sensitive) else self.value,
            "type": self.type,
            "description": self.description,
            "category": self.category,
            "isSensitive": self.is_sensitive,
            "isActive": self.is_active,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


class BackupRecord(db.Model):
    __tablename__ = "backup_records"

    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(1000), nullable=False)
    size = db.Column(db.Integer, nullable=False, default=0)
    checksum = db.Column(db.String(64), nullable=False)
    status = db.Column(db.Enum(BackupStatus, native_enum=False, length=20), nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    created_at = db.Column(db.DateTime, nullable=False, default=now_local, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "location": self.location,
            "size": self.size,
            "checksum": self.checksum,
            "status": self.status,
            "createdBy": self.created_by,
            "createdAt": self.created_at,
        }


class SystemMetric(db.Model):
    __tablename__ = "system_metrics"

    id = db.Column(db.Integer, primary_key=True)
    metric_type = db.Column(db.Enum(MetricType, native_enum=False, length=20), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    value = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(20))
    recorded_at = db.Column(db.DateTime, nullable=False, default=now_local, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "metricType": self.metric_type,
            "name": self.name,
            "value": self.value,
            "unit": self.unit,
            "timestamp": self.recorded_at,
        }
