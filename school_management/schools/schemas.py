from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator

from ..common.schemas import CamelModel


class SchoolCreate(CamelModel):
    name: str = Field(min_length=1)
    district: str = Field(min_length=1)
    logo_url: Optional[str] = None

    @field_validator("logo_url")
    @classmethod
    def check_logo_url(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Invalid URL")
        return value


class ClassCreate(CamelModel):
    name: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    school_id: int
    is_attendance_enabled: bool = True


class StudentCreate(CamelModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    class_id: int
