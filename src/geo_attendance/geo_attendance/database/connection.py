from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DBConfig:
    path: str
    timeout: float = 5.0


class DatabaseConnection:
    """SQLite connection factory for the local store.

    Note: We create short-lived connections per operation, so a file path is
    required; ``:memory:`` would lose data between operations.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def path(self) -> str:
        return self._config.path

    def connect(self) -> sqlite3.Connection:
        Path(self._config.path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._config.path, timeout=self._config.timeout)
        conn.row_factory = sqlite3.Row
        return conn
