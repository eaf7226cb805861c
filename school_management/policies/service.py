from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import PolicyScope
from ..core.exceptions import NotFoundError, ValidationError
from .model import AttendancePolicy, EffectivePolicy, default_policy
from .repository import PolicyRepository
from .schemas import PolicyCreate, PolicyUpdate

logger = logging.getLogger(__name__)


def is_student_of_concern(present_count: int, total_lessons: int, policy: EffectivePolicy) -> bool:
    """A student is of concern when their attendance rate is below the threshold."""
    if total_lessons == 0:
        return False
    rate = present_count / total_lessons * 100
    return rate < policy.concern_threshold


def should_auto_excuse(reason: str, policy: EffectivePolicy) -> bool:
    if not policy.auto_excuse_enabled:
        return False
    return (reason or "").lower() in policy.auto_excuse_reasons


class PolicyService:
    """Use case: resolve and administer attendance policies."""

    def __init__(self, policies: PolicyRepository):
        self._policies = policies

    def get_effective_policy(
        self,
        class_id: Optional[int] = None,
        school_id: Optional[int] = None,
        *,
        now: Optional[datetime] = None,
    ) -> EffectivePolicy:
        """Most specific policy in force: class, then school, then global, then defaults."""
        at = now or now_local()

        if class_id is not None:
            policy = self._policies.find_current(PolicyScope.CLASS, at=at, class_id=class_id)
            if policy:
                return policy

        if school_id is not None:
            policy = self._policies.find_current(PolicyScope.SCHOOL, at=at, school_id=school_id)
            if policy:
                return policy

        policy = self._policies.find_current(PolicyScope.GLOBAL, at=at)
        if policy:
            return policy

        return default_policy()

    def list_policies(self) -> Sequence[AttendancePolicy]:
        return self._policies.list_all()

    def get_policy(self, policy_id: int) -> AttendancePolicy:
        policy = self._policies.get_by_id(policy_id)
        if not policy:
            raise NotFoundError("Policy not found")
        return policy

    def create_policy(self, data: PolicyCreate, *, now: Optional[datetime] = None) -> AttendancePolicy:
        self._check_scope_target(data.scope, school_id=data.school_id, class_id=data.class_id)
        at = now or now_local()

        closed = self._policies.close_open_ended(
            data.scope, school_id=data.school_id, class_id=data.class_id, at=at
        )
        if closed:
            logger.info("Closed %s open-ended %s policies before creating %r", closed, data.scope.value, data.name)

        policy = AttendancePolicy(
            name=data.name,
            description=data.description,
            scope=data.scope,
            school_id=data.school_id,
            class_id=data.class_id,
            concern_threshold=data.concern_threshold,
            late_tolerance_minutes=data.late_tolerance_minutes,
            max_absences=data.max_absences,
            auto_excuse_enabled=data.auto_excuse_enabled,
            auto_excuse_reasons=[r.lower() for r in data.auto_excuse_reasons],
            effective_from=_naive(data.effective_from) or at,
            effective_to=_naive(data.effective_to),
            is_active=True,
        )
        return self._policies.add(policy)

    def update_policy(self, policy_id: int, data: PolicyUpdate) -> AttendancePolicy:
        policy = self.get_policy(policy_id)
        changes = data.model_dump(exclude_unset=True)

        if "auto_excuse_reasons" in changes and changes["auto_excuse_reasons"] is not None:
            changes["auto_excuse_reasons"] = [r.lower() for r in changes["auto_excuse_reasons"]]
        for key in ("effective_from", "effective_to"):
            if key in changes:
                changes[key] = _naive(changes[key])

        for key, value in changes.items():
            if value is None and key not in ("description", "effective_to"):
                continue
            setattr(policy, key, value)

        return self._policies.save(policy)

    def deactivate_policy(self, policy_id: int, *, now: Optional[datetime] = None) -> AttendancePolicy:
        policy = self.get_policy(policy_id)
        policy.is_active = False
        policy.effective_to = now or now_local()
        return self._policies.save(policy)

    def ensure_default_global_policy(self) -> Optional[AttendancePolicy]:
        """Create the global policy from built-in defaults unless one is active."""
        if self._policies.has_active_global():
            return None
        defaults = default_policy()
        policy = AttendancePolicy(
            name=defaults.name,
            description=defaults.description,
            scope=PolicyScope.GLOBAL,
            concern_threshold=defaults.concern_threshold,
            late_tolerance_minutes=defaults.late_tolerance_minutes,
            max_absences=defaults.max_absences,
            auto_excuse_enabled=False,
            auto_excuse_reasons=[],
            effective_from=now_local(),
            is_active=True,
        )
        return self._policies.add(policy)

    @staticmethod
    def _check_scope_target(scope: PolicyScope, *, school_id: Optional[int], class_id: Optional[int]) -> None:
        if scope == PolicyScope.SCHOOL and school_id is None:
            raise ValidationError("School policies require schoolId")
        if scope == PolicyScope.CLASS and (class_id is None or school_id is None):
            raise ValidationError("Class policies require classId and schoolId")
        if scope == PolicyScope.GLOBAL and (school_id is not None or class_id is not None):
            raise ValidationError("Global policies cannot target a school or class")


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
