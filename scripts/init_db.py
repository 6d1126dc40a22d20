"""Create the attendance tables on the MySQL server of a settings module.

Usage: python scripts/init_db.py [development|production|testing]
(defaults to APP_ENV / ATTENDANCE_SETTINGS).
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Optional, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_tracker.attendance_tracker.database.bootstrap import apply_schema, list_tables
from src.attendance_tracker.attendance_tracker.database.connection import DBConfig

SCHEMA_PATH = REPO_ROOT / "database" / "schema.sql"
REQUIRED_TABLES = ("attendance_records", "users")


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    settings_module = get_settings_module(argv[0] if argv else None)
    settings = importlib.import_module(settings_module)

    db_config = getattr(settings, "DB_CONFIG", None)
    if not db_config:
        print(f"SKIP: {settings_module} has no DB_CONFIG (STORE_BACKEND={getattr(settings, 'STORE_BACKEND', '-')})")
        return 1

    apply_schema(db_config, schema_path=SCHEMA_PATH)
    tables = set(list_tables(db_config))
    missing = [t for t in REQUIRED_TABLES if t not in tables]
    target = DBConfig.from_dict(db_config).describe()
    if missing:
        print(f"FAIL: {target} is missing tables: {', '.join(missing)}")
        return 2

    print(f"OK: schema applied to {target} ({', '.join(sorted(tables))})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
