from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from pydantic import Field, field_validator

from ..common.schemas import CamelModel
from ..common.validators import is_email
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role


def _check_email(value: Optional[str]) -> Optional[str]:
    if value is not None and not is_email(value):
        raise ValueError("Invalid email address")
    return value.lower() if value else value


class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserCreate(CamelModel):
    username: str = Field(min_length=1)
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    role: Role
    school_id: Optional[int] = None
    hourly_rate: Decimal = Field(default=Decimal("0"), ge=0)
    specializations: list[str] = Field(default_factory=list)

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return _check_email(value)


class UserUpdate(CamelModel):
    username: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    specializations: Optional[list[str]] = None
    bio: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return _check_email(value)


class TeacherCreate(CamelModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str
    username: str = Field(min_length=3)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    hourly_rate: Decimal = Field(gt=0)
    specializations: list[str] = Field(min_length=1)
    bio: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return _check_email(value)


class BulkRequest(CamelModel):
    operation: str = Field(min_length=1)
    users: list[dict[str, Any]] = Field(min_length=1)


class ForgotPasswordRequest(CamelModel):
    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return _check_email(value)


class ResetPasswordRequest(CamelModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=1)
