from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from flask.json.provider import DefaultJSONProvider


def to_float(value: Any) -> float:
    if value is None:
        return 0.0
    return float(value)


class AppJSONProvider(DefaultJSONProvider):
    """ISO timestamps and plain numbers instead of Flask's HTTP dates and strings."""

    sort_keys = False

    @staticmethod
    def default(o: Any) -> Any:
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        if isinstance(o, Decimal):
            return float(o)
        if isinstance(o, Enum):
            return o.value
        return DefaultJSONProvider.default(o)
