from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from flask import has_request_context, request
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..core import constants
from ..core.enums import AuditAction, AuditSeverity
from ..extensions import db
from ..users.model import User
from .model import AuditLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditFilters:
    user_id: Optional[int] = None
    action: Optional[AuditAction] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    severity: Optional[AuditSeverity] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    page: int = 1
    limit: int = constants.AUDIT_PAGE_SIZE


def client_info() -> tuple[Optional[str], Optional[str]]:
    """User agent and client address of the current request, if any."""
    if not has_request_context():
        return None, None
    forwarded = request.headers.get("X-Forwarded-For", "")
    ip = forwarded.split(",")[0].strip() if forwarded else request.remote_addr
    return request.headers.get("User-Agent"), ip


class AuditService:
    """Append-only trail of administrative actions."""

    def log(
        self,
        *,
        action: AuditAction,
        entity_type: str,
        entity_id: Any = None,
        old_values: Optional[dict] = None,
        new_values: Optional[dict] = None,
        severity: AuditSeverity = AuditSeverity.INFO,
        metadata: Optional[dict] = None,
        user_id: Optional[int] = None,
    ) -> Optional[AuditLog]:
        """Write one entry. Audit failures are logged and never reach the caller."""
        user_agent, ip_address = client_info()
        entry = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            old_values=old_values,
            new_values=new_values,
            severity=severity,
            meta=metadata,
            user_id=user_id,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        try:
            db.session.add(entry)
            db.session.commit()
            return entry
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to write audit log for %s %s", action, entity_type)
            return None

    def get_logs(self, filters: AuditFilters) -> dict:
        page = max(filters.page, 1)
        limit = max(filters.limit, 1)

        query = self._filtered(AuditLog.query, filters)
        total = query.count()
        logs = (
            query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "logs": [entry.to_dict() for entry in logs],
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit),
        }

    def get_summary(self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None) -> dict:
        filters = AuditFilters(start_date=start_date, end_date=end_date)

        def grouped(column, *, limit: Optional[int] = None):
            query = self._filtered(db.session.query(column, func.count(AuditLog.id)), filters).group_by(column)
            query = query.order_by(func.count(AuditLog.id).desc())
            if limit:
                query = query.limit(limit)
            return query.all()

        total = self._filtered(AuditLog.query, filters).count()
        by_user = grouped(AuditLog.user_id, limit=10)
        users = {
            u.id: u
            for u in User.query.filter(User.id.in_([uid for uid, _ in by_user if uid is not None])).all()
        }

        return {
            "totalLogs": total,
            "actionStats": [{"action": action, "count": count} for action, count in grouped(AuditLog.action)],
            "severityStats": [{"severity": sev, "count": count} for sev, count in grouped(AuditLog.severity)],
            "userStats": [
                {
                    "userId": uid,
                    "count": count,
                    "user": users[uid].to_dict(with_profiles=False) if uid in users else None,
                }
                for uid, count in by_user
            ],
            "entityStats": [
                {"entityType": entity, "count": count} for entity, count in grouped(AuditLog.entity_type)
            ],
        }

    @staticmethod
    def _filtered(query, filters: AuditFilters):
        if filters.user_id is not None:
            query = query.filter(AuditLog.user_id == filters.user_id)
        if filters.action is not None:
            query = query.filter(AuditLog.action == filters.action)
        if filters.entity_type:
            query = query.filter(AuditLog.entity_type == filters.entity_type)
        if filters.entity_id:
            query = query.filter(AuditLog.entity_id == filters.entity_id)
        if filters.severity is not None:
            query = query.filter(AuditLog.severity == filters.severity)
        if filters.start_date is not None:
            query = query.filter(AuditLog.created_at >= filters.start_date)
        if filters.end_date is not None:
            query = query.filter(AuditLog.created_at <= filters.end_date)
        return query
