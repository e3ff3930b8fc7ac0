from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Dict, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.sqlite_base import (
    db_cursor,
    fetchall,
    fetchone,
    from_db_date,
    from_db_datetime,
    to_db_date,
    to_db_datetime,
)
from .model import AttendanceRecord, new_record_id
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, owner_id, work_date, check_in_time, check_out_time,
    check_in_manual, check_out_manual, latitude, longitude
"""


def _owner_key(owner: Optional[str]) -> str:
    return owner or ""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=r["record_id"],
        owner_id=r.get("owner_id"),
        work_date=from_db_date(r["work_date"]),
        check_in_time=from_db_datetime(r.get("check_in_time")),
        check_out_time=from_db_datetime(r.get("check_out_time")),
        check_in_manual=bool(r.get("check_in_manual")),
        check_out_manual=bool(r.get("check_out_manual")),
        latitude=r.get("latitude"),
        longitude=r.get("longitude"),
    )


class SQLiteAttendanceRepository(AttendanceRepository):
    """Local embedded store. Guest records (owner None) live here only."""

    def __init__(self, conn_factory: DatabaseConnection, *, clock: Callable[[], datetime] = now_local):
        self._conn_factory = conn_factory
        self._clock = clock

    def _today(self) -> date:
        return self._clock().date()

    def _select_day(self, cur, owner: Optional[str], work_date: date) -> Optional[AttendanceRecord]:
        cur.execute(
            f"SELECT {_COLUMNS} FROM attendance_records WHERE owner_key=? AND work_date=?",
            (_owner_key(owner), to_db_date(work_date)),
        )
        r = fetchone(cur)
        return _to_record(r) if r else None

    def _select_id(self, cur, record_id: str) -> Optional[AttendanceRecord]:
        cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=?", (record_id,))
        r = fetchone(cur)
        return _to_record(r) if r else None

    def fetch_today(self, owner: Optional[str]) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_day(cur, owner, self._today())

    def fetch_history(self, owner: Optional[str], start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE owner_key=? AND work_date BETWEEN ? AND ?
                ORDER BY work_date DESC
                """,
                (_owner_key(owner), to_db_date(start_date), to_db_date(end_date)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def fetch_by_id(self, owner: Optional[str], record_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=? AND owner_key=?",
                (record_id, _owner_key(owner)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def check_in(
        self,
        owner: Optional[str],
        *,
        time: datetime,
        manual: bool,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> AttendanceRecord:
        today = self._today()
        with db_cursor(self._conn_factory) as (_, cur):
            # Single-statement upsert on the (owner, day) key: a repeated call
            # updates the existing row instead of racing a read-then-insert.
            cur.execute(
                """
                INSERT INTO attendance_records(
                    record_id, owner_id, owner_key, work_date,
                    check_in_time, check_in_manual, latitude, longitude
                )
                VALUES(?,?,?,?,?,?,?,?)
                ON CONFLICT(owner_key, work_date) DO UPDATE SET
                    check_in_time=excluded.check_in_time,
                    check_in_manual=excluded.check_in_manual,
                    latitude=excluded.latitude,
                    longitude=excluded.longitude
                """,
                (
                    new_record_id(),
                    owner,
                    _owner_key(owner),
                    to_db_date(today),
                    to_db_datetime(time),
                    int(bool(manual)),
                    latitude,
                    longitude,
                ),
            )
            record = self._select_day(cur, owner, today)
        if record is None:
            raise NotFoundError("Attendance record not found")
        return record

    def check_out(self, owner: Optional[str], *, time: datetime, manual: bool) -> AttendanceRecord:
        today = self._today()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=?, check_out_manual=?
                WHERE owner_key=? AND work_date=?
                """,
                (to_db_datetime(time), int(bool(manual)), _owner_key(owner), to_db_date(today)),
            )
            if cur.rowcount == 0:
                raise NotFoundError()
            record = self._select_day(cur, owner, today)
        if record is None:
            raise NotFoundError()
        return record

    def update_time(
        self,
        record: AttendanceRecord,
        *,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
    ) -> AttendanceRecord:
        sets: list[str] = []
        params: list[object] = []
        if check_in_time is not None:
            sets.append("check_in_time=?, check_in_manual=1")
            params.append(to_db_datetime(check_in_time))
        if check_out_time is not None:
            sets.append("check_out_time=?, check_out_manual=1")
            params.append(to_db_datetime(check_out_time))

        with db_cursor(self._conn_factory) as (_, cur):
            if sets:
                cur.execute(
                    f"UPDATE attendance_records SET {', '.join(sets)} WHERE record_id=?",
                    (*params, record.record_id),
                )
                if cur.rowcount == 0:
                    raise NotFoundError("Attendance record not found")
            updated = self._select_id(cur, record.record_id)
        if updated is None:
            raise NotFoundError("Attendance record not found")
        return updated

    def delete(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE record_id=?", (record.record_id,))
            return cur.rowcount > 0

    def clear(self, owner: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE owner_key=?", (_owner_key(owner),))
            return int(cur.rowcount)

    def count(self, owner: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_records WHERE owner_key=?", (_owner_key(owner),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
