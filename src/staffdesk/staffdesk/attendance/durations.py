from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional, Sequence

from ..core.enums import PauseEventType
from .model import AttendanceLog, PauseEvent


def parse_event_timestamp(value: Any) -> datetime:
    """ISO-8601 timestamp from the JSON log; aware values become local naive time."""

    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def events_from_json(raw: Optional[Iterable[dict]]) -> tuple[PauseEvent, ...]:
    return tuple(
        PauseEvent(type=PauseEventType(item["type"]), timestamp=parse_event_timestamp(item["timestamp"]))
        for item in (raw or [])
    )


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end`` (floored)."""
    return int((end - start).total_seconds() // 60)


def total_paused_minutes(events: Sequence[PauseEvent]) -> int:
    """Sum of (resume - pause) over the pairs (0,1), (2,3), ...

    Only pairs shaped (pause, resume) count; a trailing pause adds nothing
    until it is resumed.
    """

    total = 0
    for i in range(0, len(events) - 1, 2):
        first, second = events[i], events[i + 1]
        if first.type == PauseEventType.PAUSE and second.type == PauseEventType.RESUME:
            total += minutes_between(first.timestamp, second.timestamp)
    return total


def net_worked_minutes(log: AttendanceLog, *, now: datetime) -> int:
    end = log.clock_out_time or now
    minutes = minutes_between(log.clock_in_time, end) - int(log.total_paused_minutes or 0)
    return max(minutes, 0)


def format_duration(minutes: int) -> str:
    """``8h 0m`` style."""
    minutes = max(int(minutes), 0)
    return f"{minutes // 60}h {minutes % 60}m"


def format_hours(log: AttendanceLog) -> str:
    """Net hours of a finished session with one decimal; open sessions show ``0.0``."""

    if not log.clock_out_time:
        return "0.0"
    minutes = minutes_between(log.clock_in_time, log.clock_out_time) - int(log.total_paused_minutes or 0)
    return f"{max(minutes, 0) / 60:.1f}"
