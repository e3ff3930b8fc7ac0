from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Storage contract shared by the local and the remote backend.

    Both implementations key records by (owner, calendar day) and must behave
    identically; I/O failures surface as ``PersistenceError``.
    """

    def fetch_today(self, owner: Optional[str]) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def fetch_history(self, owner: Optional[str], start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        """Inclusive range, newest first."""

        raise NotImplementedError

    def fetch_by_id(self, owner: Optional[str], record_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def check_in(
        self,
        owner: Optional[str],
        *,
        time: datetime,
        manual: bool,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> AttendanceRecord:
        """Upsert today's record; never creates a second record for the day."""

        raise NotImplementedError

    def check_out(self, owner: Optional[str], *, time: datetime, manual: bool) -> AttendanceRecord:
        """Raises ``NotFoundError`` when there is no record for today."""

        raise NotImplementedError

    def update_time(
        self,
        record: AttendanceRecord,
        *,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
    ) -> AttendanceRecord:
        raise NotImplementedError

    def delete(self, record: AttendanceRecord) -> bool:
        raise NotImplementedError

    def clear(self, owner: Optional[str]) -> int:
        raise NotImplementedError

    def count(self, owner: Optional[str]) -> int:
        raise NotImplementedError
