from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PolicyScope
from .model import AttendancePolicy, EffectivePolicy


class PolicyRepository(Protocol):
    def find_current(
        self,
        scope: PolicyScope,
        *,
        at: datetime,
        school_id: Optional[int] = None,
        class_id: Optional[int] = None,
    ) -> Optional[EffectivePolicy]:
        """Newest active policy of ``scope`` whose validity window contains ``at``."""

        raise NotImplementedError

    def list_all(self) -> Sequence[AttendancePolicy]:
        raise NotImplementedError

    def get_by_id(self, policy_id: int) -> Optional[AttendancePolicy]:
        raise NotImplementedError

    def close_open_ended(
        self,
        scope: PolicyScope,
        *,
        school_id: Optional[int],
        class_id: Optional[int],
        at: datetime,
    ) -> int:
        """End-date active policies without ``effective_to`` for the same target."""

        raise NotImplementedError

    def add(self, policy: AttendancePolicy) -> AttendancePolicy:
        raise NotImplementedError

    def save(self, policy: AttendancePolicy) -> AttendancePolicy:
        raise NotImplementedError

    def has_active_global(self) -> bool:
        raise NotImplementedError
