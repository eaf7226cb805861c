from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import generate_password_hash

from ..common.validators import require_email
from ..core.constants import BULK_DEFAULT_PASSWORD
from ..core.enums import AuditAction, BulkOperation, Role
from ..core.exceptions import DomainError, ValidationError
from ..extensions import db
from ..system.audit import AuditService
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class BulkResult:
    success: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    details: list[dict] = field(default_factory=list)

    def ok(self, user_id: Any, action: str, email: Optional[str] = None) -> None:
        self.success += 1
        detail = {"id": user_id, "action": action}
        if email is not None:
            detail["email"] = email
        self.details.append(detail)

    def fail(self, message: str) -> None:
        self.failed += 1
        self.errors.append(message)

    def to_dict(self) -> dict:
        return {"success": self.success, "failed": self.failed, "errors": self.errors, "details": self.details}


def split_name(name: Optional[str]) -> tuple[str, str]:
    parts = (name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


class BulkUserService:
    """Apply one operation to many users; each item succeeds or fails on its own."""

    def __init__(self, users: UserRepository, audit: AuditService):
        self._users = users
        self._audit = audit

    def run(self, operation: str, items: list[dict], *, actor_id: Optional[int] = None) -> BulkResult:
        try:
            op = BulkOperation(operation)
        except ValueError:
            raise ValidationError("Invalid operation")
        if not items:
            raise ValidationError("Invalid request data")

        handler = {
            BulkOperation.CREATE: self._create,
            BulkOperation.UPDATE: self._update,
            BulkOperation.ACTIVATE: lambda item: self._set_active(item, True),
            BulkOperation.DEACTIVATE: lambda item: self._set_active(item, False),
            BulkOperation.DELETE: self._delete,
        }[op]

        result = BulkResult()
        for item in items:
            try:
                user_id, action, email = handler(item)
                result.ok(user_id, action, email)
            except (DomainError, SQLAlchemyError) as exc:
                db.session.rollback()
                label = item.get("email") or item.get("id")
                result.fail(f"Failed to {op.value} {label}: {exc}")

        logger.info("Bulk %s: %s ok, %s failed", op.value, result.success, result.failed)
        self._audit.log(
            action=AuditAction.BULK_OPERATION,
            entity_type="user",
            metadata={"operation": op.value, "success": result.success, "failed": result.failed},
            user_id=actor_id,
        )
        return result

    def _require_user(self, item: dict) -> User:
        user_id = item.get("id")
        try:
            user = self._users.get_by_id(int(user_id))
        except (TypeError, ValueError):
            user = None
        if not user:
            raise ValidationError(f"User not found: {user_id}")
        return user

    def _create(self, item: dict):
        email = require_email(item.get("email"))
        if self._users.find_conflict(username=email, email=email):
            raise ValidationError("username or email already exists")

        first, last = split_name(item.get("name"))
        try:
            role = Role(item.get("role") or Role.TEACHER.value)
        except ValueError:
            raise ValidationError(f"invalid role {item.get('role')}")

        user = User(
            username=email,
            email=email,
            password_hash=generate_password_hash(BULK_DEFAULT_PASSWORD),
            first_name=item.get("firstName") or first,
            last_name=item.get("lastName") or last,
            role=role,
            active=item.get("isActive", True) is not False,
        )
        self._users.add(user)
        return user.id, "created", user.email

    def _update(self, item: dict):
        user = self._require_user(item)
        if item.get("email") is not None:
            email = require_email(item["email"])
            if self._users.find_conflict(username=None, email=email, exclude_id=user.id):
                raise ValidationError("email already exists")
            user.email = email
        if item.get("name") is not None:
            user.first_name, user.last_name = split_name(item["name"])
        for key, attr in (("firstName", "first_name"), ("lastName", "last_name")):
            if item.get(key) is not None:
                setattr(user, attr, item[key])
        if item.get("role") is not None:
            try:
                user.role = Role(item["role"])
            except ValueError:
                raise ValidationError(f"invalid role {item['role']}")
        if item.get("isActive") is not None:
            user.active = bool(item["isActive"])
        self._users.save(user)
        return user.id, "updated", user.email

    def _set_active(self, item: dict, active: bool):
        user = self._require_user(item)
        user.active = active
        self._users.save(user)
        return user.id, "activated" if active else "deactivated", None

    def _delete(self, item: dict):
        user = self._require_user(item)
        user_id = user.id
        self._users.delete(user)
        return user_id, "deleted", None
