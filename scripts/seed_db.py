from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for p in (REPO_ROOT, REPO_ROOT / "src" / "activity_reports"):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from config import get_settings_module

from activity_reports.database.bootstrap import DEMO_USERS, ensure_demo_users


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_users(db_config)

    print(
        "OK: Seeded demo users -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )
    for username, _, password, _, role in DEMO_USERS:
        print(f"  {role:<9} {username} / {password}")


if __name__ == "__main__":
    main()
