from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r}") from None


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None or value == "":
        return None
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"Invalid timestamp: {value!r}") from None
    # Naive local time is the convention everywhere in the package.
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def parse_month(value: str) -> date:
    """Parse YYYY-MM into the first day of that month."""
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid month: {value!r}") from None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), datetime.min.time())


def month_bounds(month: date) -> tuple[date, date]:
    """First and last day of the month containing ``month``."""
    first = month.replace(day=1)
    next_first = (first + timedelta(days=32)).replace(day=1)
    return first, next_first - timedelta(days=1)


def format_hm(seconds: Optional[float]) -> str:
    if seconds is None:
        return "--:--"
    total = int(seconds)
    return f"{total // 3600:02d}:{(total % 3600) // 60:02d}"


def format_hours_minutes(seconds: float) -> str:
    total = int(seconds)
    return f"{total // 3600} h {(total % 3600) // 60:02d} min"
