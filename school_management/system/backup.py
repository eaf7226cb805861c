"""Backups of the database and the runtime configuration.

A backup file is plain text made of sections:

    -- DATABASE BACKUP        (optional, SQL dump)
    -- SYSTEM CONFIGURATION   (JSON list of configuration rows)
    -- BACKUP METADATA        (one JSON line)

The SHA-256 checksum of the complete file is kept on the BackupRecord and
verified before a restore.
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
import os
import subprocess
from datetime import timedelta
from pathlib import Path
from typing import Optional

from ..common.datetime_utils import now_local
from ..core import constants
from ..core.enums import AuditAction, AuditSeverity, BackupStatus
from ..core.exceptions import DomainError, NotFoundError, OperationError, ValidationError
from ..extensions import db
from .audit import AuditService
from .configuration import ConfigurationService
from .model import BackupRecord
from .schemas import BackupRequest

logger = logging.getLogger(__name__)

DB_MARKER = "-- DATABASE BACKUP"
CONFIG_MARKER = "-- SYSTEM CONFIGURATION"
META_MARKER = "-- BACKUP METADATA"
BACKUP_VERSION = "1.0.0"


class BackupError(OperationError):
    """Raised when a dump or restore command fails."""


def calculate_checksum(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _section_body(section: str) -> str:
    """Drop the ``-- `` header lines and the blank line that ends them."""
    lines = section.split("\n")
    i = 0
    while i < len(lines) and lines[i].startswith("--"):
        i += 1
    if i < len(lines) and lines[i] == "":
        i += 1
    return "\n".join(lines[i:]).strip("\n")


def split_sections(content: str) -> dict[str, str]:
    positions = sorted(
        (content.find(marker), name)
        for name, marker in (("database", DB_MARKER), ("configuration", CONFIG_MARKER), ("metadata", META_MARKER))
        if content.find(marker) != -1
    )
    sections = {}
    for idx, (start, name) in enumerate(positions):
        end = positions[idx + 1][0] if idx + 1 < len(positions) else len(content)
        sections[name] = content[start:end]
    return sections


class BackupService:
    """Create, list, restore and delete backup files."""

    def __init__(self, audit: AuditService, configuration: ConfigurationService, *, backup_dir: str):
        self._audit = audit
        self._configuration = configuration
        self._backup_dir = Path(backup_dir)

    # Dump and restore of the database itself

    def _dump_database(self) -> str:
        url = db.engine.url
        backend = url.get_backend_name()
        if backend == "sqlite":
            raw = db.engine.raw_connection()
            try:
                return "\n".join(raw.driver_connection.iterdump())
            finally:
                raw.close()
        if backend == "mysql":
            cmd = [
                "mysqldump",
                f"-h{url.host or 'localhost'}",
                f"-P{url.port or 3306}",
                f"-u{url.username}",
                url.database,
            ]
            env = dict(os.environ, MYSQL_PWD=url.password or "")
            try:
                result = subprocess.run(cmd, capture_output=True, text=True, check=True, env=env)
            except FileNotFoundError:
                raise BackupError("mysqldump not found, install the MySQL client tools")
            except subprocess.CalledProcessError as e:
                raise BackupError(f"mysqldump failed: {e.stderr.strip()}")
            return result.stdout
        raise BackupError(f"Database backups are not supported for {backend}")

    def _restore_database(self, sql: str) -> None:
        url = db.engine.url
        backend = url.get_backend_name()
        if backend == "sqlite":
            db.session.remove()
            db.drop_all()
            raw = db.engine.raw_connection()
            try:
                raw.driver_connection.executescript(sql)
            finally:
                raw.close()
            return
        if backend == "mysql":
            cmd = ["mysql", f"-h{url.host or 'localhost'}", f"-P{url.port or 3306}", f"-u{url.username}", url.database]
            env = dict(os.environ, MYSQL_PWD=url.password or "")
            try:
                subprocess.run(cmd, input=sql, capture_output=True, text=True, check=True, env=env)
            except FileNotFoundError:
                raise BackupError("mysql client not found, install the MySQL client tools")
            except subprocess.CalledProcessError as e:
                raise BackupError(f"Database restore failed: {e.stderr.strip()}")
            return
        raise BackupError(f"Database restore is not supported for {backend}")

    # Use cases

    def create_backup(self, request: BackupRequest, *, user_id: Optional[int] = None) -> BackupRecord:
        options = request.model_dump(by_alias=True)
        try:
            self._backup_dir.mkdir(parents=True, exist_ok=True)
            now = now_local()
            stamp = now.strftime("%Y%m%d-%H%M%S-%f")
            filename = f"backup-{stamp}.sql"
            path = self._backup_dir / filename

            parts = []
            if request.include_database:
                parts.append(
                    f"{DB_MARKER}\n-- Database: {db.engine.url.database}\n-- Generated: {now.isoformat()}\n\n"
                    f"{self._dump_database()}"
                )
            parts.append(
                f"{CONFIG_MARKER}\n-- Generated: {now.isoformat()}\n\n"
                f"{json.dumps(self._configuration.snapshot(), indent=2)}"
            )
            metadata = {"timestamp": now.isoformat(), "version": BACKUP_VERSION, "config": options}
            parts.append(f"{META_MARKER}\n-- {json.dumps(metadata)}\n")
            content = "\n\n".join(parts)

            path.write_text(content, encoding="utf-8")
            record = BackupRecord(
                filename=filename,
                location=str(path),
                size=len(content.encode("utf-8")),
                checksum=calculate_checksum(content),
                status=BackupStatus.COMPLETED,
                created_by=user_id,
            )
            db.session.add(record)
            db.session.commit()
        except (OSError, BackupError) as e:
            db.session.rollback()
            logger.exception("Backup creation failed")
            self._audit.log(
                action=AuditAction.CREATE,
                entity_type="backup",
                severity=AuditSeverity.ERROR,
                metadata={"error": str(e), "config": options},
                user_id=user_id,
            )
            raise

        self._audit.log(
            action=AuditAction.CREATE,
            entity_type="backup",
            entity_id=record.id,
            metadata={"filename": record.filename, "size": record.size, "config": options},
            user_id=user_id,
        )
        self.cleanup_old_backups()
        return record

    def cleanup_old_backups(self) -> int:
        """Delete backups past retention, always keeping the newest ones."""
        cutoff = now_local() - timedelta(days=constants.BACKUP_RETENTION_DAYS)
        old = (
            BackupRecord.query.filter(BackupRecord.created_at < cutoff)
            .order_by(BackupRecord.created_at.desc())
            .offset(constants.BACKUP_KEEP_LATEST)
            .all()
        )
        removed = 0
        for record in old:
            try:
                Path(record.location).unlink(missing_ok=True)
            except OSError:
                logger.exception("Failed to delete backup file %s", record.location)
                continue
            db.session.delete(record)
            removed += 1
        db.session.commit()
        return removed

    def list_backups(self, page: int = 1, limit: int = constants.BACKUP_PAGE_SIZE) -> dict:
        page = max(page, 1)
        limit = max(limit, 1)
        total = BackupRecord.query.count()
        rows = (
            BackupRecord.query.order_by(BackupRecord.created_at.desc(), BackupRecord.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "backups": [r.to_dict() for r in rows],
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit),
        }

    def get_backup(self, backup_id: int) -> BackupRecord:
        record = db.session.get(BackupRecord, backup_id)
        if not record:
            raise NotFoundError("Backup not found")
        return record

    def restore_backup(self, backup_id: int, *, user_id: Optional[int] = None) -> bool:
        record = self.get_backup(backup_id)
        try:
            if record.status != BackupStatus.COMPLETED:
                raise ValidationError("Backup not found or not completed")
            path = Path(record.location)
            if not path.exists():
                raise ValidationError("Backup file not found")

            content = path.read_text(encoding="utf-8")
            if calculate_checksum(content) != record.checksum:
                raise ValidationError("Backup file integrity check failed")

            sections = split_sections(content)
            if "configuration" not in sections:
                raise ValidationError("Configuration backup section not found")
            configs = json.loads(_section_body(sections["configuration"]))
            filename, size = record.filename, record.size

            if "database" in sections:
                self._restore_database(_section_body(sections["database"]))
            restored = self._configuration.restore(configs)
        except (ValidationError, BackupError, ValueError) as e:
            db.session.rollback()
            logger.error("Backup restore failed: %s", e)
            self._audit.log(
                action=AuditAction.UPDATE,
                entity_type="backup_restore",
                severity=AuditSeverity.ERROR,
                metadata={"error": str(e), "backupId": backup_id},
                user_id=user_id,
            )
            if isinstance(e, DomainError):
                raise
            raise ValidationError(f"Restore failed: {e}") from e

        self._audit.log(
            action=AuditAction.UPDATE,
            entity_type="backup_restore",
            entity_id=backup_id,
            severity=AuditSeverity.WARNING,
            metadata={"filename": filename, "size": size, "configurations": restored},
            user_id=user_id,
        )
        return True

    def delete_backup(self, backup_id: int, *, user_id: Optional[int] = None) -> bool:
        record = self.get_backup(backup_id)
        Path(record.location).unlink(missing_ok=True)
        filename = record.filename
        db.session.delete(record)
        db.session.commit()
        self._audit.log(
            action=AuditAction.DELETE,
            entity_type="backup",
            entity_id=backup_id,
            severity=AuditSeverity.WARNING,
            metadata={"filename": filename},
            user_id=user_id,
        )
        return True
