from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..core.exceptions import PersistenceError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection) -> Iterator[Tuple[sqlite3.Connection, sqlite3.Cursor]]:
    """One transaction per block; driver errors become ``PersistenceError``."""
    try:
        conn = conn_factory.connect()
    except sqlite3.Error as exc:
        raise PersistenceError(exc) from exc
    try:
        cur = conn.cursor()
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except sqlite3.Error as exc:
        conn.rollback()
        raise PersistenceError(exc) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur: sqlite3.Cursor) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return dict(row) if row else None


def fetchall(cur: sqlite3.Cursor) -> List[Dict[str, Any]]:
    return [dict(r) for r in cur.fetchall() or []]


# SQLite has no native date types; values are stored as ISO-8601 text so that
# lexical order matches chronological order.

def to_db_date(value: date) -> str:
    return value.isoformat()


def from_db_date(value: str) -> date:
    return date.fromisoformat(value)


def to_db_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def from_db_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None
