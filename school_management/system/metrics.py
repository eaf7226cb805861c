"""Host, database and application metrics.

Everything here reads from the standard library and ``/proc``; values that
are unavailable on the current platform are reported as 0.
"""

from __future__ import annotations

import logging
import os
import shutil
import threading
import time
from collections import Counter
from datetime import timedelta
from typing import Optional

from flask import Flask
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..common.datetime_utils import now_local
from ..core import constants
from ..core.enums import MetricType
from ..extensions import db
from .model import SystemMetric

logger = logging.getLogger(__name__)


class RequestStats:
    """Per-process request counter fed by an ``after_request`` hook."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._started = clock()
        self._statuses: Counter = Counter()

    def record(self, status_code: int) -> None:
        key = str(status_code) if status_code in (200, 404, 500) else "other"
        with self._lock:
            self._statuses[key] += 1

    @property
    def uptime(self) -> float:
        return self._clock() - self._started

    def snapshot(self) -> dict:
        with self._lock:
            statuses = dict(self._statuses)
        total = sum(statuses.values())
        uptime = self.uptime
        return {
            "total": total,
            "perSecond": round(total / uptime, 3) if uptime > 0 else 0.0,
            "status": {k: statuses.get(k, 0) for k in ("200", "404", "500", "other")},
        }


def _read_meminfo() -> dict[str, int]:
    values = {}
    try:
        with open("/proc/meminfo", encoding="ascii") as f:
            for line in f:
                name, _, rest = line.partition(":")
                values[name] = int(rest.split()[0]) * 1024
    except (OSError, ValueError, IndexError):
        return {}
    return values


def _system_uptime() -> float:
    try:
        with open("/proc/uptime", encoding="ascii") as f:
            return float(f.read().split()[0])
    except (OSError, ValueError, IndexError):
        return 0.0


def _percent(part: float, whole: float) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


class SystemMetricsService:
    def __init__(self, stats: Optional[RequestStats] = None):
        self.stats = stats or RequestStats()

    def install(self, app: Flask) -> None:
        @app.after_request
        def _count_request(response):
            self.stats.record(response.status_code)
            return response

    def system_info(self) -> dict:
        cores = os.cpu_count() or 1
        try:
            load1, load5, load15 = os.getloadavg()
        except OSError:
            load1 = load5 = load15 = 0.0

        mem = _read_meminfo()
        total = mem.get("MemTotal", 0)
        free = mem.get("MemAvailable", mem.get("MemFree", 0))
        used = total - free

        disk = shutil.disk_usage("/")
        return {
            "uptime": _system_uptime(),
            "memory": {"total": total, "used": used, "free": free, "usage": _percent(used, total)},
            "cpu": {"usage": min(round(load1 / cores * 100, 2), 100.0), "cores": cores},
            "disk": {
                "total": disk.total,
                "used": disk.used,
                "free": disk.free,
                "usage": _percent(disk.used, disk.total),
            },
            "load": {"1m": load1, "5m": load5, "15m": load15},
        }

    def database_info(self) -> dict:
        backend = db.engine.url.get_backend_name()
        try:
            started = time.perf_counter()
            db.session.execute(text("SELECT 1"))
            query_ms = round((time.perf_counter() - started) * 1000, 3)

            if backend == "mysql":
                size = db.session.execute(
                    text(
                        "SELECT COALESCE(SUM(data_length + index_length), 0) "
                        "FROM information_schema.tables WHERE table_schema = DATABASE()"
                    )
                ).scalar()
                connections = db.session.execute(text("SHOW STATUS LIKE 'Threads_connected'")).fetchone()
                max_connections = db.session.execute(text("SHOW VARIABLES LIKE 'max_connections'")).fetchone()
                connections = int(connections[1]) if connections else 0
                max_connections = int(max_connections[1]) if max_connections else 0
            elif backend == "sqlite":
                page_count = db.session.execute(text("PRAGMA page_count")).scalar() or 0
                page_size = db.session.execute(text("PRAGMA page_size")).scalar() or 0
                size = page_count * page_size
                connections, max_connections = 1, 1
            else:
                size, connections, max_connections = 0, 0, 0
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to read database metrics")
            return {"connections": 0, "maxConnections": 0, "size": 0, "queryTime": 0.0}
        return {
            "connections": connections,
            "maxConnections": max_connections,
            "size": int(size or 0),
            "queryTime": query_ms,
        }

    def application_info(self) -> dict:
        try:
            import resource

            # ru_maxrss is in kilobytes on Linux
            peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss * 1024
        except (ImportError, OSError):
            peak = 0
        rss = 0
        try:
            with open("/proc/self/statm", encoding="ascii") as f:
                rss = int(f.read().split()[1]) * os.sysconf("SC_PAGE_SIZE")
        except (OSError, ValueError, IndexError):
            rss = peak
        return {
            "uptime": round(self.stats.uptime, 3),
            "memory": {"used": rss, "peak": peak},
            "requests": self.stats.snapshot(),
        }

    def collect(self) -> dict:
        """Read current metrics and store the headline values."""
        metrics = {
            "system": self.system_info(),
            "database": self.database_info(),
            "application": self.application_info(),
        }
        self._store(metrics)
        return metrics

    def _store(self, metrics: dict) -> None:
        recorded_at = now_local()
        system, database, application = metrics["system"], metrics["database"], metrics["application"]
        rows = [
            (MetricType.SYSTEM, "cpu_usage", system["cpu"]["usage"], "%"),
            (MetricType.SYSTEM, "memory_usage", system["memory"]["usage"], "%"),
            (MetricType.SYSTEM, "disk_usage", system["disk"]["usage"], "%"),
            (MetricType.SYSTEM, "system_uptime", system["uptime"], "seconds"),
            (MetricType.DATABASE, "database_connections", database["connections"], "count"),
            (MetricType.DATABASE, "database_size", database["size"], "bytes"),
            (MetricType.DATABASE, "query_time", database["queryTime"], "ms"),
            (MetricType.APPLICATION, "application_uptime", application["uptime"], "seconds"),
            (MetricType.APPLICATION, "total_requests", application["requests"]["total"], "count"),
            (MetricType.APPLICATION, "requests_per_second", application["requests"]["perSecond"], "rps"),
        ]
        try:
            for metric_type, name, value, unit in rows:
                db.session.add(
                    SystemMetric(metric_type=metric_type, name=name, value=float(value), unit=unit, recorded_at=recorded_at)
                )
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to store metrics")

    def history(self, hours: int = constants.METRICS_HISTORY_HOURS) -> list[dict]:
        """Stored metrics of the last ``hours`` hours, one entry per collection."""
        since = now_local() - timedelta(hours=hours)
        rows = (
            SystemMetric.query.filter(SystemMetric.recorded_at >= since)
            .order_by(SystemMetric.recorded_at.asc(), SystemMetric.id.asc())
            .all()
        )
        grouped: dict = {}
        for row in rows:
            entry = grouped.setdefault(row.recorded_at, {"timestamp": row.recorded_at, "metrics": {}})
            entry["metrics"][row.name] = {"type": row.metric_type, "value": row.value, "unit": row.unit}
        return list(grouped.values())
