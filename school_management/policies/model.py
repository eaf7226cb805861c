from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from ..common.datetime_utils import now_local
from ..core import constants
from ..core.enums import PolicyScope
from ..extensions import db


class AttendancePolicy(db.Model):
    __tablename__ = "attendance_policies"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    scope = db.Column(db.Enum(PolicyScope, native_enum=False, length=20), nullable=False)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"))
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"))
    concern_threshold = db.Column(db.Integer, nullable=False, default=constants.DEFAULT_CONCERN_THRESHOLD)
    late_tolerance_minutes = db.Column(db.Integer, nullable=False, default=constants.DEFAULT_LATE_TOLERANCE_MINUTES)
    max_absences = db.Column(db.Integer, nullable=False, default=constants.DEFAULT_MAX_ABSENCES)
    auto_excuse_enabled = db.Column(db.Boolean, nullable=False, default=False)
    auto_excuse_reasons = db.Column(db.JSON, nullable=False, default=list)
    effective_from = db.Column(db.DateTime, nullable=False, default=now_local)
    effective_to = db.Column(db.DateTime)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=now_local)
    updated_at = db.Column(db.DateTime, nullable=False, default=now_local, onupdate=now_local)

    school = db.relationship("School")
    school_class = db.relationship("SchoolClass")

    def to_snapshot(self) -> "EffectivePolicy":
        return EffectivePolicy(
            id=self.id,
            name=self.name,
            description=self.description,
            scope=PolicyScope(self.scope),
            school_id=self.school_id,
            class_id=self.class_id,
            concern_threshold=int(self.concern_threshold),
            late_tolerance_minutes=int(self.late_tolerance_minutes),
            max_absences=int(self.max_absences),
            auto_excuse_enabled=bool(self.auto_excuse_enabled),
            auto_excuse_reasons=tuple(self.auto_excuse_reasons or ()),
            effective_from=self.effective_from,
            effective_to=self.effective_to,
            is_active=bool(self.is_active),
        )

    def to_dict(self) -> dict:
        data = self.to_snapshot().to_dict()
        data["createdAt"] = self.created_at
        data["updatedAt"] = self.updated_at
        data["school"] = {"id": self.school.id, "name": self.school.name} if self.school else None
        data["class"] = (
            {
                "id": self.school_class.id,
                "name": self.school_class.name,
                "school": {"name": self.school_class.school.name},
            }
            if self.school_class
            else None
        )
        return data


@dataclass(frozen=True)
class EffectivePolicy:
    """Resolved policy values, detached from the ORM session."""

    id: Union[int, str]
    name: str
    scope: PolicyScope
    concern_threshold: int
    late_tolerance_minutes: int
    max_absences: int
    auto_excuse_enabled: bool = False
    auto_excuse_reasons: tuple[str, ...] = field(default_factory=tuple)
    description: Optional[str] = None
    school_id: Optional[int] = None
    class_id: Optional[int] = None
    effective_from: Optional[datetime] = None
    effective_to: Optional[datetime] = None
    is_active: bool = True

    @property
    def is_default(self) -> bool:
        return self.id == constants.DEFAULT_POLICY_ID

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "scope": self.scope,
            "schoolId": self.school_id,
            "classId": self.class_id,
            "concernThreshold": self.concern_threshold,
            "lateToleranceMinutes": self.late_tolerance_minutes,
            "maxAbsences": self.max_absences,
            "autoExcuseEnabled": self.auto_excuse_enabled,
            "autoExcuseReasons": list(self.auto_excuse_reasons),
            "effectiveFrom": self.effective_from,
            "effectiveTo": self.effective_to,
            "isActive": self.is_active,
        }


def default_policy() -> EffectivePolicy:
    return EffectivePolicy(
        id=constants.DEFAULT_POLICY_ID,
        name=constants.DEFAULT_POLICY_NAME,
        description=constants.DEFAULT_POLICY_DESCRIPTION,
        scope=PolicyScope.GLOBAL,
        concern_threshold=constants.DEFAULT_CONCERN_THRESHOLD,
        late_tolerance_minutes=constants.DEFAULT_LATE_TOLERANCE_MINUTES,
        max_absences=constants.DEFAULT_MAX_ABSENCES,
    )
