from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterator, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..core.exceptions import PersistenceError

ATTENDANCE_COLLECTION = "attendance"
USERS_COLLECTION = "users"


@dataclass(frozen=True)
class MongoConfig:
    uri: str
    database: str
    server_selection_timeout_ms: int = 5000


class MongoConnection:
    """Lazily created MongoDB client for the remote store.

    ``MongoClient`` pools connections internally, so one instance is shared by
    every request. Tests inject a client (e.g. ``mongomock.MongoClient``).
    """

    def __init__(self, config: MongoConfig, *, client: Optional[MongoClient] = None):
        self._config = config
        self._client = client
        self._indexes_ready = False

    @property
    def client(self) -> MongoClient:
        if self._client is None:
            self._client = MongoClient(
                self._config.uri,
                serverSelectionTimeoutMS=self._config.server_selection_timeout_ms,
                tz_aware=False,
            )
        return self._client

    def collection(self, name: str) -> Collection:
        db = self.client[self._config.database]
        if not self._indexes_ready:
            db[ATTENDANCE_COLLECTION].create_index(
                [("owner_id", ASCENDING), ("work_date", ASCENDING)],
                unique=True,
                name="uniq_owner_work_date",
            )
            db[ATTENDANCE_COLLECTION].create_index("record_id", unique=True, name="uniq_record_id")
            self._indexes_ready = True
        return db[name]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


@contextmanager
def mongo_errors() -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        raise PersistenceError(exc) from exc


# BSON has no date type and stores datetimes with millisecond precision.

def to_bson_day(value: date) -> datetime:
    return datetime(value.year, value.month, value.day)


def to_bson_datetime(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)
