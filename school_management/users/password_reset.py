from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Optional

from werkzeug.security import generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_min_length
from ..core.constants import MIN_RESET_PASSWORD_LENGTH, RESET_TOKEN_HOURS
from ..core.enums import AuditAction
from ..extensions import db
from ..system.audit import AuditService
from .model import PasswordResetToken, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class PasswordResetService:
    """Single-use tokens that let an active user choose a new password."""

    def __init__(self, users: UserRepository, audit: AuditService):
        self._users = users
        self._audit = audit

    def create_reset_token(self, email: str) -> Optional[str]:
        """Issue a token, or None for unknown or inactive accounts."""
        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            return None

        token = secrets.token_urlsafe(32)
        db.session.add(
            PasswordResetToken(
                token=token,
                user_id=user.id,
                expires_at=now_local() + timedelta(hours=RESET_TOKEN_HOURS),
            )
        )
        db.session.commit()
        self._audit.log(
            action=AuditAction.CREATE,
            entity_type="password_reset_token",
            entity_id=user.id,
            metadata={"email": email},
            user_id=user.id,
        )
        return token

    def validate_reset_token(self, token: str) -> Optional[User]:
        reset = PasswordResetToken.query.filter_by(token=token).first()
        if not reset or not reset.user or not reset.user.is_active:
            return None
        if reset.expires_at < now_local():
            db.session.delete(reset)
            db.session.commit()
            return None
        return reset.user

    def reset_password(self, token: str, new_password: str) -> bool:
        require_min_length(new_password, "Password", MIN_RESET_PASSWORD_LENGTH)
        user = self.validate_reset_token(token)
        if not user:
            return False

        user.password_hash = generate_password_hash(new_password)
        PasswordResetToken.query.filter_by(user_id=user.id).delete()
        db.session.commit()

        self._audit.log(
            action=AuditAction.PASSWORD_CHANGE,
            entity_type="user_password",
            entity_id=user.id,
            metadata={"email": user.email},
            user_id=user.id,
        )
        return True

    def cleanup_expired_tokens(self) -> int:
        count = PasswordResetToken.query.filter(PasswordResetToken.expires_at < now_local()).delete()
        db.session.commit()
        logger.info("Cleaned up %s expired password reset tokens", count)
        return count
