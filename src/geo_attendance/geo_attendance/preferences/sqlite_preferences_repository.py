from __future__ import annotations

from typing import Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.sqlite_base import db_cursor, fetchall, fetchone
from .repository import PreferencesRepository


class SQLitePreferencesRepository(PreferencesRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT pref_value FROM app_preferences WHERE pref_key=?", (key,))
            r = fetchone(cur)
            return r["pref_value"] if r else None

    def get_all(self) -> Dict[str, str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT pref_key, pref_value FROM app_preferences")
            return {r["pref_key"]: r["pref_value"] for r in fetchall(cur)}

    def set(self, key: str, value: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO app_preferences(pref_key, pref_value) VALUES(?,?)
                ON CONFLICT(pref_key) DO UPDATE SET pref_value=excluded.pref_value
                """,
                (key, value),
            )

    def clear(self) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM app_preferences")
