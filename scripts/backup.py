"""Create a full backup (database dump + configuration) from the command line.

MySQL databases are dumped with `mysqldump`, which must be on PATH.
"""

from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from school_management import create_app
from school_management.system.backup import BackupError
from school_management.system.schemas import BackupRequest


def main() -> None:
    app = create_app()
    with app.app_context():
        backups = app.extensions["container"].backup_service
        try:
            record = backups.create_backup(BackupRequest(include_database=True))
        except BackupError as e:
            raise SystemExit(f"Backup failed: {e}")
        print(f"OK: Backup created: {record.location} ({record.size} bytes, sha256={record.checksum})")


if __name__ == "__main__":
    main()
