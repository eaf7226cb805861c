from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from ..common.schemas import CamelModel
from ..core.enums import AttendanceStatus


class AssignmentCreate(CamelModel):
    teacher_id: int
    school_id: int
    class_id: int


class LessonCreate(CamelModel):
    class_id: int
    date: datetime
    hours_worked: Decimal = Field(gt=0)
    notes: Optional[str] = None
    topic_ids: list[int] = Field(default_factory=list)
    # student id -> status; keys arrive as strings in JSON objects
    attendance: dict[str, AttendanceStatus] = Field(default_factory=dict)


class TopicCreate(CamelModel):
    class_id: int
    title: str = Field(min_length=1)
    description: Optional[str] = None
    order_index: int = Field(default=0, ge=0)
