from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional, Sequence

from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..common.datetime_utils import now_local
from ..core.exceptions import AuthRequired, NotFoundError
from ..database.mongo import (
    ATTENDANCE_COLLECTION,
    USERS_COLLECTION,
    MongoConnection,
    mongo_errors,
    to_bson_datetime,
    to_bson_day,
)
from ..users.provider import IdentityProvider
from .model import AttendanceRecord, new_record_id
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _to_record(doc: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=str(doc["record_id"]),
        owner_id=doc.get("owner_id"),
        work_date=doc["work_date"].date(),
        check_in_time=doc.get("check_in_time"),
        check_out_time=doc.get("check_out_time"),
        check_in_manual=bool(doc.get("check_in_manual", False)),
        check_out_manual=bool(doc.get("check_out_manual", False)),
        latitude=doc.get("latitude"),
        longitude=doc.get("longitude"),
    )


class MongoAttendanceRepository(AttendanceRepository):
    """Remote synchronized store.

    Every operation first makes sure a session exists, starting an anonymous
    one when the caller has none, so records always belong to an owner here.
    """

    def __init__(
        self,
        conn: MongoConnection,
        identity: IdentityProvider,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._conn = conn
        self._identity = identity
        self._clock = clock

    def _ensure_authenticated(self, owner: Optional[str]) -> str:
        if owner:
            return owner
        current = self._identity.current()
        if current is None or not current.owner_id:
            current = self._identity.sign_in_anonymously()
        if not current.owner_id:
            raise AuthRequired()
        return current.owner_id

    def _attendance(self):
        return self._conn.collection(ATTENDANCE_COLLECTION)

    def _today_key(self) -> datetime:
        return to_bson_day(self._clock().date())

    def fetch_today(self, owner: Optional[str]) -> Optional[AttendanceRecord]:
        owner = self._ensure_authenticated(owner)
        with mongo_errors():
            doc = self._attendance().find_one({"owner_id": owner, "work_date": self._today_key()})
        return _to_record(doc) if doc else None

    def fetch_history(self, owner: Optional[str], start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        owner = self._ensure_authenticated(owner)
        with mongo_errors():
            cursor = self._attendance().find(
                {
                    "owner_id": owner,
                    "work_date": {"$gte": to_bson_day(start_date), "$lte": to_bson_day(end_date)},
                }
            ).sort("work_date", DESCENDING)
            return [_to_record(doc) for doc in cursor]

    def fetch_by_id(self, owner: Optional[str], record_id: str) -> Optional[AttendanceRecord]:
        owner = self._ensure_authenticated(owner)
        with mongo_errors():
            doc = self._attendance().find_one({"record_id": record_id, "owner_id": owner})
        return _to_record(doc) if doc else None

    def check_in(
        self,
        owner: Optional[str],
        *,
        time: datetime,
        manual: bool,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> AttendanceRecord:
        owner = self._ensure_authenticated(owner)
        key = {"owner_id": owner, "work_date": self._today_key()}
        update = {
            "$set": {
                "check_in_time": to_bson_datetime(time),
                "check_in_manual": bool(manual),
                "latitude": latitude,
                "longitude": longitude,
            },
            "$setOnInsert": {
                "record_id": new_record_id(),
                "check_out_time": None,
                "check_out_manual": False,
            },
        }
        with mongo_errors():
            self._save_user_profile(owner)
            try:
                doc = self._attendance().find_one_and_update(
                    key, update, upsert=True, return_document=ReturnDocument.AFTER
                )
            except DuplicateKeyError:
                # Two upserts raced on the unique (owner, day) index; the
                # loser now finds the winner's document and updates it.
                logger.info("check-in upsert raced for owner=%s, retrying", owner)
                doc = self._attendance().find_one_and_update(
                    key, update, upsert=True, return_document=ReturnDocument.AFTER
                )
        return _to_record(doc)

    def check_out(self, owner: Optional[str], *, time: datetime, manual: bool) -> AttendanceRecord:
        owner = self._ensure_authenticated(owner)
        with mongo_errors():
            doc = self._attendance().find_one_and_update(
                {"owner_id": owner, "work_date": self._today_key()},
                {"$set": {"check_out_time": to_bson_datetime(time), "check_out_manual": bool(manual)}},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise NotFoundError()
        return _to_record(doc)

    def update_time(
        self,
        record: AttendanceRecord,
        *,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
    ) -> AttendanceRecord:
        owner = self._ensure_authenticated(record.owner_id)
        changes: Dict[str, Any] = {}
        if check_in_time is not None:
            changes.update(check_in_time=to_bson_datetime(check_in_time), check_in_manual=True)
        if check_out_time is not None:
            changes.update(check_out_time=to_bson_datetime(check_out_time), check_out_manual=True)

        with mongo_errors():
            if changes:
                doc = self._attendance().find_one_and_update(
                    {"record_id": record.record_id, "owner_id": owner},
                    {"$set": changes},
                    return_document=ReturnDocument.AFTER,
                )
            else:
                doc = self._attendance().find_one({"record_id": record.record_id, "owner_id": owner})
        if doc is None:
            raise NotFoundError("Attendance record not found")
        return _to_record(doc)

    def delete(self, record: AttendanceRecord) -> bool:
        owner = self._ensure_authenticated(record.owner_id)
        with mongo_errors():
            result = self._attendance().delete_one({"record_id": record.record_id, "owner_id": owner})
        return result.deleted_count > 0

    def clear(self, owner: Optional[str]) -> int:
        owner = self._ensure_authenticated(owner)
        with mongo_errors():
            result = self._attendance().delete_many({"owner_id": owner})
        return int(result.deleted_count)

    def count(self, owner: Optional[str]) -> int:
        owner = self._ensure_authenticated(owner)
        with mongo_errors():
            return int(self._attendance().count_documents({"owner_id": owner}))

    def _save_user_profile(self, owner: str) -> None:
        identity = self._identity.current()
        data: Dict[str, Any] = {"last_active": self._clock()}
        if identity is not None and identity.owner_id == owner:
            data.update(name=identity.display_name, is_anonymous=identity.is_anonymous)
            if identity.email:
                data["email"] = identity.email
            if identity.phone:
                data["phone"] = identity.phone
        self._conn.collection(USERS_COLLECTION).update_one({"_id": owner}, {"$set": data}, upsert=True)
