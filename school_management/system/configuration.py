from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..core import constants
from ..core.enums import AuditAction, ConfigType
from ..core.exceptions import NotFoundError, ValidationError
from ..extensions import db
from .audit import AuditService
from .model import SystemConfiguration
from .schemas import ConfigurationCreate, ConfigurationUpdate

logger = logging.getLogger(__name__)


class ConfigValue:
    """A raw stored string with lenient typed readers."""

    def __init__(self, value: Optional[str]):
        self._value = value

    def as_string(self) -> str:
        return self._value or ""

    def as_number(self) -> float:
        if not self._value:
            return 0
        try:
            return float(self._value)
        except ValueError:
            return 0

    def as_boolean(self) -> bool:
        if not self._value:
            return False
        return self._value.lower() == "true" or self._value == "1"

    def as_json(self) -> Any:
        if not self._value:
            return {}
        try:
            return json.loads(self._value)
        except ValueError:
            return {}

    def exists(self) -> bool:
        return self._value is not None


class ConfigurationService:
    """Database-backed runtime settings, cached for a few minutes."""

    def __init__(
        self,
        audit: AuditService,
        *,
        ttl_seconds: float = constants.CONFIG_CACHE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._audit = audit
        self._ttl = ttl_seconds
        self._clock = clock
        self._cache: dict[str, ConfigValue] = {}
        self._loaded_at: Optional[float] = None

    # Cached reads

    def _load(self) -> None:
        now = self._clock()
        if self._loaded_at is not None and now - self._loaded_at < self._ttl:
            return
        try:
            rows = SystemConfiguration.query.filter(SystemConfiguration.is_active.is_(True)).all()
        except SQLAlchemyError:
            logger.exception("Error loading configurations")
            return
        self._cache = {row.key: ConfigValue(row.value) for row in rows}
        self._loaded_at = now

    def clear_cache(self) -> None:
        self._cache = {}
        self._loaded_at = None

    def get(self, key: str, default: Optional[str] = None) -> ConfigValue:
        self._load()
        return self._cache.get(key) or ConfigValue(default)

    def get_string(self, key: str, default: str = "") -> str:
        return self.get(key, default).as_string()

    def get_number(self, key: str, default: float = 0) -> float:
        return self.get(key, str(default)).as_number()

    def get_boolean(self, key: str, default: bool = False) -> bool:
        return self.get(key, "true" if default else "false").as_boolean()

    def get_json(self, key: str, default: Any = None) -> Any:
        return self.get(key, json.dumps(default if default is not None else {})).as_json()

    def exists(self, key: str) -> bool:
        return self.get(key).exists()

    def get_category(self, category: str) -> dict[str, ConfigValue]:
        self._load()
        prefix = f"{category}."
        return {key: value for key, value in self._cache.items() if key.startswith(prefix)}

    def system_info(self) -> dict:
        return {
            "name": self.get_string("system.name", "School Management"),
            "version": self.get_string("system.version", "1.0.0"),
            "environment": self.get_string("system.environment", "development"),
            "debug": self.get_boolean("system.debug", False),
            "maintenance": self.get_boolean("system.maintenance", False),
        }

    def email_config(self) -> dict:
        return {
            "smtp": {
                "host": self.get_string("email.smtp.host"),
                "port": int(self.get_number("email.smtp.port", 587)),
                "secure": self.get_boolean("email.smtp.secure", False),
                "user": self.get_string("email.smtp.user"),
                "pass": self.get_string("email.smtp.pass"),
            },
            "from": self.get_string("email.from"),
            "enabled": self.get_boolean("email.enabled", False),
        }

    def security_config(self) -> dict:
        return {
            "maxLoginAttempts": int(self.get_number("security.maxLoginAttempts", 5)),
            "lockoutDuration": int(self.get_number("security.lockoutDuration", 15 * 60 * 1000)),
            "passwordMinLength": int(self.get_number("security.passwordMinLength", 8)),
            "requireStrongPassword": self.get_boolean("security.requireStrongPassword", True),
            "sessionTimeout": int(self.get_number("security.sessionTimeout", 30 * 60 * 1000)),
            "enableTwoFactor": self.get_boolean("security.enableTwoFactor", False),
        }

    def backup_config(self) -> dict:
        return {
            "enabled": self.get_boolean("backup.enabled", False),
            "schedule": self.get_string("backup.schedule", "0 2 * * *"),
            "retention": int(self.get_number("backup.retention", constants.BACKUP_RETENTION_DAYS)),
            "location": self.get_string("backup.location"),
            "compression": self.get_boolean("backup.compression", True),
        }

    # Administration

    def list_configurations(self) -> Sequence[SystemConfiguration]:
        return SystemConfiguration.query.order_by(SystemConfiguration.category, SystemConfiguration.key).all()

    def get_configuration(self, config_id: int) -> SystemConfiguration:
        row = db.session.get(SystemConfiguration, config_id)
        if not row:
            raise NotFoundError("Configuration not found")
        return row

    def create_configuration(self, data: ConfigurationCreate, *, actor_id: Optional[int] = None) -> SystemConfiguration:
        if SystemConfiguration.query.filter_by(key=data.key).first():
            raise ValidationError("Configuration key already exists")
        row = SystemConfiguration(
            key=data.key,
            value=data.value,
            type=data.type,
            category=data.category,
            description=data.description,
            is_sensitive=data.is_sensitive,
            is_active=True,
        )
        db.session.add(row)
        db.session.commit()
        self.clear_cache()
        self._audit.log(
            action=AuditAction.CREATE,
            entity_type="system_configuration",
            entity_id=row.id,
            new_values={"key": row.key, "category": row.category},
            user_id=actor_id,
        )
        return row

    def update_configuration(
        self, config_id: int, data: ConfigurationUpdate, *, actor_id: Optional[int] = None
    ) -> SystemConfiguration:
        row = self.get_configuration(config_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("key") and changes["key"] != row.key:
            if SystemConfiguration.query.filter_by(key=changes["key"]).first():
                raise ValidationError("Configuration key already exists")

        old_values = {"key": row.key, "value": None if row.is_sensitive else row.value}
        for key, value in changes.items():
            if value is None and key != "description":
                continue
            setattr(row, key, value)
        db.session.commit()
        self.clear_cache()
        self._audit.log(
            action=AuditAction.UPDATE,
            entity_type="system_configuration",
            entity_id=row.id,
            old_values=old_values,
            new_values={"key": row.key, "value": None if row.is_sensitive else row.value},
            user_id=actor_id,
        )
        return row

    def delete_configuration(self, config_id: int, *, actor_id: Optional[int] = None) -> None:
        row = self.get_configuration(config_id)
        key = row.key
        db.session.delete(row)
        db.session.commit()
        self.clear_cache()
        self._audit.log(
            action=AuditAction.DELETE,
            entity_type="system_configuration",
            entity_id=config_id,
            old_values={"key": key},
            user_id=actor_id,
        )

    def snapshot(self) -> list[dict]:
        """All rows as plain dicts, for backups."""
        return [
            {
                "key": row.key,
                "value": row.value,
                "type": row.type.value,
                "description": row.description,
                "category": row.category,
                "isSensitive": row.is_sensitive,
                "isActive": row.is_active,
            }
            for row in SystemConfiguration.query.order_by(SystemConfiguration.key).all()
        ]

    def restore(self, items: list[dict]) -> int:
        """Upsert rows by key; returns how many were written."""
        count = 0
        for item in items:
            row = SystemConfiguration.query.filter_by(key=item["key"]).first()
            if row is None:
                row = SystemConfiguration(key=item["key"])
                db.session.add(row)
            row.value = item.get("value", "")
            row.type = ConfigType(item.get("type") or ConfigType.STRING.value)
            row.description = item.get("description")
            row.category = item.get("category") or "general"
            row.is_sensitive = bool(item.get("isSensitive", False))
            row.is_active = bool(item.get("isActive", True))
            count += 1
        db.session.commit()
        self.clear_cache()
        return count
