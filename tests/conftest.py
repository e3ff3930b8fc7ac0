from __future__ import annotations

from datetime import datetime
from typing import Optional

import mongomock
import pytest

from src.geo_attendance.geo_attendance.database.bootstrap import apply_schema
from src.geo_attendance.geo_attendance.database.connection import DBConfig, DatabaseConnection
from src.geo_attendance.geo_attendance.database.mongo import MongoConfig, MongoConnection
from src.geo_attendance.geo_attendance.users.model import Identity


class FixedClock:
    """Settable clock injected wherever the package asks for "now"."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class StaticIdentityProvider:
    def __init__(self, identity: Optional[Identity] = None):
        self.identity = identity
        self.anonymous_sign_ins = 0

    def current(self) -> Optional[Identity]:
        return self.identity

    def sign_in_anonymously(self) -> Identity:
        self.anonymous_sign_ins += 1
        self.identity = Identity(owner_id=f"anon-{self.anonymous_sign_ins}", is_anonymous=True)
        return self.identity


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 14, 9, 5, 0)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def sqlite_conn(tmp_path) -> DatabaseConnection:
    conn = DatabaseConnection(DBConfig(path=str(tmp_path / "attendance.sqlite3")))
    apply_schema(conn)
    return conn


@pytest.fixture
def mongo_conn() -> MongoConnection:
    conn = MongoConnection(
        MongoConfig(uri="mongodb://localhost:27017", database="geo_attendance_test"),
        client=mongomock.MongoClient(),
    )
    yield conn
    conn.close()


@pytest.fixture
def identity_provider() -> StaticIdentityProvider:
    return StaticIdentityProvider()
