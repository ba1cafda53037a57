from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    v = (value or "").strip()
    if not v:
        return None
    return parse_iso_date(v)


def whole_seconds(value: datetime) -> datetime:
    """Drop microseconds; DATETIME columns store whole seconds and MySQL rounds the rest."""
    return value.replace(microsecond=0)


def now_local() -> datetime:
    """Current local time, truncated to whole seconds.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return whole_seconds(datetime.now())


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """First and last second of a calendar day."""
    return datetime.combine(day, time(0, 0, 0)), datetime.combine(day, time(23, 59, 59))


def format_clock_time(value: datetime) -> str:
    """12-hour clock without a leading zero, e.g. ``9:05 AM``."""
    hour = value.strftime("%I").lstrip("0")
    return f"{hour}:{value.strftime('%M %p')}"


def format_long_date(value: datetime) -> str:
    """e.g. ``Monday, March 3, 2025``."""
    return f"{value.strftime('%A, %B')} {value.day}, {value.year}"
