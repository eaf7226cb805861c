from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from ..model import LessonHours
from .base import WageCalculator

CENT = Decimal("0.01")


class HourlyWageCalculator(WageCalculator):
    """Hourly rule: hours of lessons that took place, times the hourly rate."""

    def billable_hours(self, lessons: Iterable[LessonHours]) -> Decimal:
        total = sum((Decimal(lesson.hours_worked) for lesson in lessons if not lesson.is_cancelled), Decimal("0"))
        return total.quantize(CENT, rounding=ROUND_HALF_UP)

    def amount(self, hours: Decimal, hourly_rate: Decimal) -> Decimal:
        return (Decimal(hours) * Decimal(hourly_rate)).quantize(CENT, rounding=ROUND_HALF_UP)
