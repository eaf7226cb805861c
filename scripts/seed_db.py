from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from school_management import create_app
from school_management.database.bootstrap import init_db, seed_demo_data
from school_management.extensions import db


def main() -> None:
    app = create_app()
    with app.app_context():
        init_db(app.config["SQLALCHEMY_DATABASE_URI"])
        seed_demo_data()
        print(f"OK: Seeded database -> {db.engine.url.render_as_string(hide_password=True)}")
        print("Demo logins: admin/admin123, teacher1/teacher123, principal1/principal123")


if __name__ == "__main__":
    main()
