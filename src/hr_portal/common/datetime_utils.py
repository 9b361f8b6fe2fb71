from __future__ import annotations

import calendar
from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def month_range(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    last_day = calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last_day)


def elapsed_hours(start: datetime, end: datetime) -> float:
    """Hours between two timestamps, rounded to two decimals."""
    return round((end - start).total_seconds() / 3600, 2)


def inclusive_days(start: date, end: date) -> int:
    """Number of calendar days from start to end, counting both endpoints."""
    return (end - start).days + 1
