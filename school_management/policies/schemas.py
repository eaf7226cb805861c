from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..common.schemas import CamelModel
from ..core.enums import PolicyScope


class PolicyCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    scope: PolicyScope
    school_id: Optional[int] = None
    class_id: Optional[int] = None
    concern_threshold: int = Field(ge=1, le=100)
    late_tolerance_minutes: int = Field(ge=0, le=180)
    max_absences: int = Field(ge=1, le=365)
    auto_excuse_enabled: bool = False
    auto_excuse_reasons: list[str] = Field(default_factory=list)
    effective_from: Optional[datetime] = None
    effective_to: Optional[datetime] = None


class PolicyUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    concern_threshold: Optional[int] = Field(default=None, ge=1, le=100)
    late_tolerance_minutes: Optional[int] = Field(default=None, ge=0, le=180)
    max_absences: Optional[int] = Field(default=None, ge=1, le=365)
    auto_excuse_enabled: Optional[bool] = None
    auto_excuse_reasons: Optional[list[str]] = None
    effective_from: Optional[datetime] = None
    effective_to: Optional[datetime] = None
    is_active: Optional[bool] = None
