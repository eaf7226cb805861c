from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import case, or_

from ..core.enums import PolicyScope
from ..extensions import db
from .model import AttendancePolicy, EffectivePolicy
from .repository import PolicyRepository


# Widest scope first
_SCOPE_ORDER = case(
    {PolicyScope.GLOBAL: 0, PolicyScope.SCHOOL: 1, PolicyScope.CLASS: 2},
    value=AttendancePolicy.scope,
)


class SqlAlchemyPolicyRepository(PolicyRepository):
    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session or db.session

    def find_current(
        self,
        scope: PolicyScope,
        *,
        at: datetime,
        school_id: Optional[int] = None,
        class_id: Optional[int] = None,
    ) -> Optional[EffectivePolicy]:
        query = self.session.query(AttendancePolicy).filter(
            AttendancePolicy.scope == scope,
            AttendancePolicy.is_active.is_(True),
            AttendancePolicy.effective_from <= at,
            or_(AttendancePolicy.effective_to.is_(None), AttendancePolicy.effective_to >= at),
        )
        if scope == PolicyScope.CLASS:
            query = query.filter(AttendancePolicy.class_id == class_id)
        elif scope == PolicyScope.SCHOOL:
            query = query.filter(AttendancePolicy.school_id == school_id)

        row = query.order_by(AttendancePolicy.effective_from.desc(), AttendancePolicy.id.desc()).first()
        return row.to_snapshot() if row else None

    def list_all(self) -> Sequence[AttendancePolicy]:
        return (
            self.session.query(AttendancePolicy)
            .order_by(_SCOPE_ORDER, AttendancePolicy.created_at.desc(), AttendancePolicy.id.desc())
            .all()
        )

    def get_by_id(self, policy_id: int) -> Optional[AttendancePolicy]:
        return self.session.get(AttendancePolicy, policy_id)

    def close_open_ended(
        self,
        scope: PolicyScope,
        *,
        school_id: Optional[int],
        class_id: Optional[int],
        at: datetime,
    ) -> int:
        rows = (
            self.session.query(AttendancePolicy)
            .filter(
                AttendancePolicy.scope == scope,
                AttendancePolicy.school_id.is_(None) if school_id is None else AttendancePolicy.school_id == school_id,
                AttendancePolicy.class_id.is_(None) if class_id is None else AttendancePolicy.class_id == class_id,
                AttendancePolicy.is_active.is_(True),
                AttendancePolicy.effective_to.is_(None),
            )
            .all()
        )
        for row in rows:
            row.effective_to = at
            row.is_active = False
        return len(rows)

    def add(self, policy: AttendancePolicy) -> AttendancePolicy:
        self.session.add(policy)
        self.session.commit()
        return policy

    def save(self, policy: AttendancePolicy) -> AttendancePolicy:
        self.session.commit()
        return policy

    def has_active_global(self) -> bool:
        return (
            self.session.query(AttendancePolicy.id)
            .filter(AttendancePolicy.scope == PolicyScope.GLOBAL, AttendancePolicy.is_active.is_(True))
            .first()
            is not None
        )
