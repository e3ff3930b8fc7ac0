"""Backup the local attendance store.

Uses SQLite's online backup API, so the copy is consistent even while the
server is running. Remote (MongoDB) data is backed up with ``mongodump``.
"""

from __future__ import annotations

import importlib
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.geo_attendance.geo_attendance.database.bootstrap import backup_database
from src.geo_attendance.geo_attendance.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig(path=str(settings.DB_CONFIG["path"])))
    if not Path(conn.path).exists():
        raise SystemExit(f"Local store not found: {conn.path}")

    out_dir = REPO_ROOT / "backups"
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = backup_database(conn, target=out_dir / f"attendance_{ts}.sqlite3")
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
