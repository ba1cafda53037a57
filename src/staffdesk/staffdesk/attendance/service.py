from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import day_bounds, format_clock_time, format_long_date, now_local, whole_seconds
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import PauseEventType, SessionStatus
from ..core.exceptions import ValidationError
from ..users.repository import UserRepository
from .durations import format_duration, format_hours, net_worked_minutes, total_paused_minutes
from .model import AttendanceLog, PauseEvent
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

NO_TIME = "- - : - -"


@dataclass(frozen=True)
class AttendanceRowUI:
    log_id: int
    date: str
    check_in: str
    check_out: str
    hours: str
    duration: str
    paused_minutes: int
    status: str
    css_class: str
    location: Optional[str]
    auto_clockout: bool


class AttendanceService:
    """Use case: one user's clock-in / pause / resume / clock-out session per day."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._attendance = attendance
        self._users = users
        self._history_limit = int(history_limit)

    def get_today(self, user_id: int, *, now: datetime | None = None) -> Optional[AttendanceLog]:
        now = whole_seconds(now or now_local())
        start, end = day_bounds(now.date())
        return self._attendance.get_for_user_between(int(user_id), start, end)

    def list_logs(self, user_id: int) -> list[AttendanceLog]:
        return list(self._attendance.list_for_user(int(user_id), self._history_limit))

    def history(self, user_id: int, *, now: datetime | None = None) -> list[AttendanceLog]:
        """All sessions, minus today's session while it is still open."""

        today = self.get_today(user_id, now=now)
        logs = self.list_logs(user_id)
        if today is None or today.clock_out_time is not None:
            return logs
        return [log for log in logs if log.id != today.id]

    def get_log(self, user_id: int, log_id: int) -> AttendanceLog:
        log = self._attendance.get_by_id(int(log_id))
        if not log or log.user_id != int(user_id):
            raise ValidationError("Attendance record not found")
        return log

    def clock_in(self, user_id: int, *, location: Optional[str] = None, now: datetime | None = None) -> AttendanceLog:
        now = whole_seconds(now or now_local())

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise ValidationError("User does not exist")

        if self.get_today(user_id, now=now):
            raise ValidationError("You have already clocked in today")

        log_id = self._attendance.create_clock_in(
            user_id=user.user_id,
            full_name=user.full_name,
            email=user.email,
            clock_in_time=now,
            location=location,
        )
        logger.info("User %s clocked in (log %s, location=%s)", user.user_id, log_id, location or "-")
        return self._reload(log_id)

    def pause(self, user_id: int, *, now: datetime | None = None) -> AttendanceLog:
        now = whole_seconds(now or now_local())

        log = self.get_today(user_id, now=now)
        if not log or log.status != SessionStatus.WORKING or not log.is_open:
            raise ValidationError("Cannot pause work at this time")

        events = log.pause_resume_log + (PauseEvent(type=PauseEventType.PAUSE, timestamp=now),)
        if not self._attendance.update_pause_state(
            log_id=log.id,
            status=SessionStatus.PAUSED,
            events=events,
            total_paused_minutes=log.total_paused_minutes,
        ):
            raise ValidationError("Failed to pause work")
        return self._reload(log.id)

    def resume(self, user_id: int, *, now: datetime | None = None) -> AttendanceLog:
        now = whole_seconds(now or now_local())

        log = self.get_today(user_id, now=now)
        if not log or log.status != SessionStatus.PAUSED or not log.is_open:
            raise ValidationError("Cannot resume work at this time")

        events = log.pause_resume_log + (PauseEvent(type=PauseEventType.RESUME, timestamp=now),)
        if not self._attendance.update_pause_state(
            log_id=log.id,
            status=SessionStatus.WORKING,
            events=events,
            total_paused_minutes=total_paused_minutes(events),
        ):
            raise ValidationError("Failed to resume work")
        return self._reload(log.id)

    def clock_out(self, user_id: int, *, now: datetime | None = None) -> AttendanceLog:
        """Close today's session; allowed while paused (no implicit resume)."""

        now = whole_seconds(now or now_local())

        log = self.get_today(user_id, now=now)
        if not log:
            raise ValidationError("You must clock in before clocking out")
        if log.clock_out_time is not None:
            raise ValidationError("You have already clocked out today")

        if not self._attendance.update_clock_out(log_id=log.id, clock_out_time=now):
            raise ValidationError("Failed to clock out")
        logger.info("User %s clocked out (log %s)", log.user_id, log.id)
        return self._reload(log.id)

    def _reload(self, log_id: int) -> AttendanceLog:
        log = self._attendance.get_by_id(log_id)
        if not log:
            raise ValidationError("Attendance record not found")
        return log

    def to_ui(self, log: AttendanceLog, *, now: datetime | None = None) -> AttendanceRowUI:
        now = whole_seconds(now or now_local())
        label, css = {
            SessionStatus.WORKING: ("Working", "bg-success"),
            SessionStatus.PAUSED: ("Paused", "bg-warning text-dark"),
            SessionStatus.COMPLETED: ("Completed", "bg-primary"),
        }.get(log.status, (log.status.value, "bg-secondary"))

        return AttendanceRowUI(
            log_id=log.id,
            date=format_long_date(log.clock_in_time),
            check_in=format_clock_time(log.clock_in_time),
            check_out=format_clock_time(log.clock_out_time) if log.clock_out_time else NO_TIME,
            hours=format_hours(log),
            duration=format_duration(net_worked_minutes(log, now=now)),
            paused_minutes=int(log.total_paused_minutes or 0),
            status=label,
            css_class=css,
            location=log.location,
            auto_clockout=log.auto_clockout,
        )
