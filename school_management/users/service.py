from __future__ import annotations

import logging
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import AuditAction, Role
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..schools.model import School
from ..system.audit import AuditService
from .model import PrincipalProfile, TeacherProfile, User
from .repository import UserRepository
from .schemas import TeacherCreate, UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, login: str, password: str) -> User:
        login = require_non_empty(login, "Username")
        user = self._users.get_by_login(login)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # unknown hash method, e.g. a placeholder value
            ok = False

        if not ok:
            logger.info("Failed login for %s", login)
            raise AuthenticationError("Invalid username or password")
        return user

    def load_user(self, user_id: str) -> Optional[User]:
        try:
            user = self._users.get_by_id(int(user_id))
        except (TypeError, ValueError):
            return None
        return user if user and user.is_active else None


class UserService:
    """Use case: manage users (admin)."""

    def __init__(self, users: UserRepository, audit: AuditService):
        self._users = users
        self._audit = audit

    def list_users(self, *, role: Optional[Role] = None) -> Sequence[User]:
        return self._users.list_all(role=role)

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def create_user(self, data: UserCreate, *, actor_id: Optional[int] = None) -> User:
        if self._users.find_conflict(username=data.username, email=data.email):
            raise ValidationError("Username or email already exists")

        user = User(
            username=data.username,
            email=data.email,
            password_hash=generate_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role,
            active=True,
        )
        if data.role == Role.TEACHER:
            user.teacher_profile = TeacherProfile(
                hourly_rate=data.hourly_rate,
                specializations=list(data.specializations),
            )
        elif data.role == Role.PRINCIPAL and data.school_id is not None:
            if not db.session.get(School, data.school_id):
                raise NotFoundError("School not found")
            user.principal_profile = PrincipalProfile(school_id=data.school_id)

        self._users.add(user)
        self._audit.log(
            action=AuditAction.CREATE,
            entity_type="user",
            entity_id=user.id,
            new_values={"username": user.username, "email": user.email, "role": user.role.value},
            user_id=actor_id,
        )
        return user

    def update_user(self, user_id: int, data: UserUpdate, *, actor_id: Optional[int] = None) -> User:
        user = self.get_user(user_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "username" in changes or "email" in changes:
            if self._users.find_conflict(
                username=changes.get("username"), email=changes.get("email"), exclude_id=user.id
            ):
                raise ValidationError("Username or email already exists")

        old_values = {"username": user.username, "email": user.email, "role": user.role.value, "isActive": user.is_active}

        for field in ("username", "email", "first_name", "last_name", "role"):
            if field in changes:
                setattr(user, field, changes[field])
        if "is_active" in changes:
            user.active = changes["is_active"]
        if "password" in changes:
            require_min_length(changes["password"], "Password", MIN_PASSWORD_LENGTH)
            user.password_hash = generate_password_hash(changes["password"])

        if user.role == Role.TEACHER and any(k in changes for k in ("hourly_rate", "specializations", "bio")):
            profile = user.teacher_profile or TeacherProfile(hourly_rate=0, specializations=[])
            if "hourly_rate" in changes:
                profile.hourly_rate = changes["hourly_rate"]
            if "specializations" in changes:
                profile.specializations = list(changes["specializations"])
            if "bio" in changes:
                profile.bio = changes["bio"]
            user.teacher_profile = profile

        self._users.save(user)
        self._audit.log(
            action=AuditAction.UPDATE,
            entity_type="user",
            entity_id=user.id,
            old_values=old_values,
            new_values={"username": user.username, "email": user.email, "role": user.role.value, "isActive": user.is_active},
            user_id=actor_id,
        )
        return user

    def delete_user(self, user_id: int, *, actor_id: Optional[int] = None) -> None:
        user = self.get_user(user_id)
        snapshot = {"username": user.username, "email": user.email, "role": user.role.value}
        self._users.delete(user)
        self._audit.log(
            action=AuditAction.DELETE,
            entity_type="user",
            entity_id=user_id,
            old_values=snapshot,
            user_id=actor_id,
        )

    def create_teacher(self, data: TeacherCreate, *, actor_id: Optional[int] = None) -> User:
        """Create the user and its teacher profile in one transaction."""
        if self._users.get_by_email(data.email):
            raise ConflictError("A user with this email already exists")
        if self._users.find_conflict(username=data.username, email=None):
            raise ConflictError("This username is already taken")

        user = User(
            username=data.username,
            email=data.email,
            password_hash=generate_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=Role.TEACHER,
            active=True,
            teacher_profile=TeacherProfile(
                hourly_rate=data.hourly_rate,
                specializations=list(data.specializations),
                bio=data.bio,
            ),
        )
        self._users.add(user)
        self._audit.log(
            action=AuditAction.CREATE,
            entity_type="teacher",
            entity_id=user.id,
            new_values={"username": user.username, "email": user.email},
            user_id=actor_id,
        )
        return user

    def list_teachers(self) -> Sequence[User]:
        return self._users.list_all(role=Role.TEACHER)
