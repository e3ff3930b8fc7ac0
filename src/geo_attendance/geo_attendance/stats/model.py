from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import format_hours_minutes


@dataclass(frozen=True)
class DailyStat:
    """Derived, never persisted."""

    date: date
    hours: float
    weekday: str

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "hours": round(self.hours, 2), "weekday": self.weekday}


@dataclass(frozen=True)
class MonthlySummary:
    month_start: date
    records: Sequence[AttendanceRecord]
    working_days_count: int
    total_worked_seconds: float

    @property
    def total_worked_hours(self) -> float:
        return self.total_worked_seconds / 3600

    @property
    def average_work_hours(self) -> float:
        if self.working_days_count == 0:
            return 0.0
        return self.total_worked_hours / self.working_days_count

    @property
    def formatted_total_worked_hours(self) -> str:
        return format_hours_minutes(self.total_worked_seconds)

    @property
    def formatted_average_work_hours(self) -> str:
        return format_hours_minutes(self.average_work_hours * 3600)

    def to_dict(self) -> dict:
        return {
            "month": self.month_start.strftime("%Y-%m"),
            "working_days": self.working_days_count,
            "total_worked_hours": round(self.total_worked_hours, 2),
            "average_work_hours": round(self.average_work_hours, 2),
            "total_worked": self.formatted_total_worked_hours,
            "average_worked": self.formatted_average_work_hours,
            "records": [r.to_dict() for r in self.records],
        }
