from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from school_management import create_app


def main() -> None:
    app = create_app()
    with app.app_context():
        policy = app.extensions["container"].policy_service.ensure_default_global_policy()
        if policy is None:
            print("OK: An active global attendance policy already exists")
        else:
            print(f"OK: Created global attendance policy #{policy.id} ({policy.name})")


if __name__ == "__main__":
    main()
