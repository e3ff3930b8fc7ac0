from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.service import AttendanceService
from ..common.datetime_utils import month_bounds, now_local
from ..core.constants import WEEKLY_WINDOW_DAYS
from ..users.model import Identity
from .model import DailyStat, MonthlySummary


def build_weekly_stats(records: Iterable[AttendanceRecord], today: date) -> List[DailyStat]:
    """Exactly one entry per day of the trailing week, oldest first.

    Days without a record, or with an incomplete one, count as 0 hours.
    """
    by_day: dict[date, AttendanceRecord] = {}
    for r in records:
        by_day.setdefault(r.work_date, r)

    stats: List[DailyStat] = []
    for offset in range(WEEKLY_WINDOW_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        record = by_day.get(day)
        seconds = record.work_seconds if record else None
        stats.append(DailyStat(date=day, hours=(seconds or 0.0) / 3600.0, weekday=day.strftime("%a")))
    return stats


def summarize_month(records: Iterable[AttendanceRecord], month: date) -> MonthlySummary:
    first, last = month_bounds(month)
    in_month = [r for r in records if first <= r.work_date <= last]
    in_month.sort(key=lambda r: r.work_date, reverse=True)

    return MonthlySummary(
        month_start=first,
        records=in_month,
        working_days_count=sum(1 for r in in_month if r.is_complete),
        total_worked_seconds=sum(r.work_seconds for r in in_month if r.work_seconds is not None),
    )


class StatsService:
    """Read-only statistics over the active backend's history."""

    def __init__(self, attendance: AttendanceService, *, clock: Callable[[], datetime] = now_local):
        self._attendance = attendance
        self._clock = clock

    def weekly(self, identity: Identity, *, today: Optional[date] = None) -> List[DailyStat]:
        today = today or self._clock().date()
        start = today - timedelta(days=WEEKLY_WINDOW_DAYS - 1)
        return build_weekly_stats(self._attendance.history(identity, start, today), today)

    def monthly(self, identity: Identity, *, month: Optional[date] = None) -> MonthlySummary:
        month = month or self._clock().date()
        first, last = month_bounds(month)
        return summarize_month(self._attendance.history(identity, first, last), first)
