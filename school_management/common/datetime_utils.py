from __future__ import annotations

import calendar
from datetime import date, datetime, time
from typing import Optional


def parse_optional_datetime(value: Optional[str]) -> Optional[datetime]:
    """Accept a date or an ISO datetime from query strings; blank means None."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """First instant and last instant of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime.combine(date(year, month, last_day), time.max)
    return start, end
