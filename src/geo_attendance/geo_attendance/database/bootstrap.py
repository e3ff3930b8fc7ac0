from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    sql = Path(schema_path).read_text(encoding="utf-8")
    conn = conn_factory.connect()
    try:
        conn.executescript(sql)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to %s", conn_factory.path)


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.execute("SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def backup_database(conn_factory: DatabaseConnection, *, target: str | Path) -> Path:
    """Online copy of the local store (consistent even while in use)."""
    target = Path(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    source = conn_factory.connect()
    try:
        dest = sqlite3.connect(str(target))
        try:
            source.backup(dest)
        finally:
            dest.close()
    finally:
        source.close()
    return target
