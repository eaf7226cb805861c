from __future__ import annotations

from flask_login import UserMixin

from ..common.datetime_utils import now_local
from ..core.enums import Role
from ..extensions import db


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    role = db.Column(db.Enum(Role, native_enum=False, length=20), nullable=False, default=Role.TEACHER)
    # Named to avoid UserMixin.is_active, which Flask-Login uses for login checks
    active = db.Column("is_active", db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=now_local)
    updated_at = db.Column(db.DateTime, nullable=False, default=now_local, onupdate=now_local)

    teacher_profile = db.relationship(
        "TeacherProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    principal_profile = db.relationship(
        "PrincipalProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    @property
    def is_active(self) -> bool:
        return bool(self.active)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self, *, with_profiles: bool = True) -> dict:
        data = {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role,
            "isActive": self.is_active,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if with_profiles:
            data["teacherProfile"] = self.teacher_profile.to_dict() if self.teacher_profile else None
            data["principalProfile"] = self.principal_profile.to_dict() if self.principal_profile else None
        return data


class TeacherProfile(db.Model):
    __tablename__ = "teacher_profiles"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    hourly_rate = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    specializations = db.Column(db.JSON, nullable=False, default=list)
    bio = db.Column(db.Text)

    user = db.relationship("User", back_populates="teacher_profile")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "hourlyRate": self.hourly_rate,
            "specializations": list(self.specializations or []),
            "bio": self.bio,
        }


class PrincipalProfile(db.Model):
    __tablename__ = "principal_profiles"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=False)

    user = db.relationship("User", back_populates="principal_profile")
    school = db.relationship("School", back_populates="principal_profile")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "schoolId": self.school_id,
            "schoolName": self.school.name if self.school else None,
        }


class PasswordResetToken(db.Model):
    __tablename__ = "password_reset_tokens"

    id = db.Column(db.Integer, primary_key=True)
    token = db.Column(db.String(128), unique=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=now_local)

    user = db.relationship("User")
