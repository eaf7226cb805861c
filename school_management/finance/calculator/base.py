from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterable

from ..model import LessonHours


class WageCalculator(ABC):
    """Calculator interface (Strategy Pattern for teacher wages)."""

    @abstractmethod
    def billable_hours(self, lessons: Iterable[LessonHours]) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def amount(self, hours: Decimal, hourly_rate: Decimal) -> Decimal:
        raise NotImplementedError
