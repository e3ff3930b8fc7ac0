from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import format_hm


def new_record_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance day for one owner.

    Snapshots are immutable; every repository operation returns a fresh one.
    ``owner_id`` is None for guest records kept only in the local store.
    """

    record_id: str
    owner_id: Optional[str]
    work_date: date
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    check_in_manual: bool = False
    check_out_manual: bool = False
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_checked_in(self) -> bool:
        return self.check_in_time is not None

    @property
    def has_checked_out(self) -> bool:
        return self.check_out_time is not None

    @property
    def is_complete(self) -> bool:
        return self.has_checked_in and self.has_checked_out

    @property
    def work_duration(self) -> Optional[timedelta]:
        if self.check_in_time is None or self.check_out_time is None:
            return None
        return self.check_out_time - self.check_in_time

    @property
    def work_seconds(self) -> Optional[float]:
        duration = self.work_duration
        return duration.total_seconds() if duration is not None else None

    @property
    def formatted_work_time(self) -> str:
        return format_hm(self.work_seconds)

    def is_today(self, today: date) -> bool:
        return self.work_date == today

    def with_times(
        self,
        *,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
    ) -> "AttendanceRecord":
        """Manual edit: patch supplied fields only and flag them manual."""
        changes: dict = {}
        if check_in_time is not None:
            changes.update(check_in_time=check_in_time, check_in_manual=True)
        if check_out_time is not None:
            changes.update(check_out_time=check_out_time, check_out_manual=True)
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "owner_id": self.owner_id,
            "date": self.work_date.isoformat(),
            "check_in_time": self.check_in_time.isoformat() if self.check_in_time else None,
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "check_in_manual": self.check_in_manual,
            "check_out_manual": self.check_out_manual,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "is_complete": self.is_complete,
            "work_time": self.formatted_work_time,
        }
