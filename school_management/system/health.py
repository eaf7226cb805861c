from __future__ import annotations

import logging
import time

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..common.datetime_utils import now_local
from ..extensions import db

logger = logging.getLogger(__name__)


class HealthService:
    def check(self) -> tuple[dict, int]:
        """Run ``SELECT 1`` and report how long it took."""
        started = time.perf_counter()
        try:
            db.session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Health check failed: %s", e)
            return {"status": "unhealthy", "database": "unreachable", "timestamp": now_local()}, 503
        return {
            "status": "ok",
            "database": "ok",
            "durationMs": round((time.perf_counter() - started) * 1000, 3),
            "timestamp": now_local(),
        }, 200
