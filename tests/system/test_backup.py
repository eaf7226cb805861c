from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path

import pytest

from school_management.common.datetime_utils import now_local
from school_management.core.enums import AuditAction, AuditSeverity, BackupStatus, ConfigType
from school_management.core.exceptions import ValidationError
from school_management.extensions import db
from school_management.schools.model import School
from school_management.system.audit import AuditService
from school_management.system.backup import BackupService, split_sections
from school_management.system.configuration import ConfigurationService
from school_management.system.model import AuditLog, BackupRecord, SystemConfiguration
from school_management.system.schemas import BackupRequest
from school_management.users.model import User


@pytest.fixture
def backups(ctx, tmp_path):
    audit = AuditService()
    return BackupService(audit, ConfigurationService(audit), backup_dir=str(tmp_path))


def _set_config(key, value):
    row = SystemConfiguration.query.filter_by(key=key).first()
    if row is None:
        row = SystemConfiguration(key=key, type=ConfigType.STRING, category="system")
        db.session.add(row)
    row.value = value
    db.session.commit()


def test_configuration_backup_round_trip(backups):
    _set_config("system.name", "Before")
    record = backups.create_backup(BackupRequest())
    assert record.status == BackupStatus.COMPLETED
    assert len(record.checksum) == 64

    content = Path(record.location).read_text(encoding="utf-8")
    sections = split_sections(content)
    assert set(sections) == {"configuration", "metadata"}
    assert record.size == len(content.encode("utf-8"))

    _set_config("system.name", "After")
    assert backups.restore_backup(record.id) is True
    assert SystemConfiguration.query.filter_by(key="system.name").one().value == "Before"

    restore_log = AuditLog.query.filter_by(entity_type="backup_restore").one()
    assert restore_log.severity == AuditSeverity.WARNING


def test_database_section_is_included_for_sqlite(backups):
    record = backups.create_backup(BackupRequest(include_database=True))
    content = Path(record.location).read_text(encoding="utf-8")
    assert content.startswith("-- DATABASE BACKUP")
    assert "CREATE TABLE" in content
    metadata = json.loads(split_sections(content)["metadata"].split("\n")[1][3:])
    assert metadata["config"]["includeDatabase"] is True


def test_restore_rolls_database_back_to_backup(backups):
    record = backups.create_backup(BackupRequest(include_database=True))
    record_id = record.id

    db.session.add(School(name="Added After Backup", district="North"))
    db.session.commit()
    assert School.query.count() == 2

    assert backups.restore_backup(record_id) is True
    assert [s.name for s in School.query.order_by(School.id)] == ["Demo Primary School"]
    assert User.query.filter_by(username="teacher1").count() == 1


def test_tampered_backup_is_refused(backups):
    record = backups.create_backup(BackupRequest())
    path = Path(record.location)
    path.write_text(path.read_text(encoding="utf-8") + "\n-- tampered", encoding="utf-8")

    with pytest.raises(ValidationError, match="integrity"):
        backups.restore_backup(record.id)
    failure = AuditLog.query.filter_by(entity_type="backup_restore", severity=AuditSeverity.ERROR).one()
    assert failure.action == AuditAction.UPDATE


def test_missing_file_is_refused(backups):
    record = backups.create_backup(BackupRequest())
    Path(record.location).unlink()
    with pytest.raises(ValidationError, match="not found"):
        backups.restore_backup(record.id)


def test_listing_and_delete(backups):
    first = backups.create_backup(BackupRequest())
    second = backups.create_backup(BackupRequest())

    page = backups.list_backups(page=1, limit=1)
    assert page["total"] == 2
    assert page["totalPages"] == 2
    assert len(page["backups"]) == 1

    backups.delete_backup(first.id)
    assert not Path(first.location).exists()
    assert backups.list_backups()["total"] == 1
    assert backups.get_backup(second.id).id == second.id


def test_cleanup_keeps_newest_ten(backups, tmp_path):
    old = now_local() - timedelta(days=40)
    for i in range(12):
        path = tmp_path / f"old-{i}.sql"
        path.write_text("x", encoding="utf-8")
        db.session.add(
            BackupRecord(
                filename=path.name,
                location=str(path),
                size=1,
                checksum="0" * 64,
                status=BackupStatus.COMPLETED,
                created_at=old + timedelta(minutes=i),
            )
        )
    db.session.commit()

    assert backups.cleanup_old_backups() == 2
    assert BackupRecord.query.count() == 10
    assert not (tmp_path / "old-0.sql").exists()
    assert (tmp_path / "old-11.sql").exists()


def test_backup_api(admin_client):
    res = admin_client.post("/api/admin/backup", json={"includeDatabase": False})
    assert res.status_code == 201
    backup_id = res.get_json()["backup"]["id"]

    listing = admin_client.get("/api/admin/backup").get_json()
    assert listing["total"] == 1
    assert listing["limit"] == 20

    assert admin_client.put(f"/api/admin/backup/{backup_id}").status_code == 200
    assert admin_client.delete(f"/api/admin/backup/{backup_id}").status_code == 200
    assert admin_client.put(f"/api/admin/backup/{backup_id}").status_code == 404
