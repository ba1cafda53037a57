from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import SessionStatus
from .model import AttendanceLog, PauseEvent


class AttendanceRepository(Protocol):
    def get_by_id(self, log_id: int) -> Optional[AttendanceLog]:
        raise NotImplementedError

    def get_for_user_between(self, user_id: int, start: datetime, end: datetime) -> Optional[AttendanceLog]:
        """Latest session whose clock-in falls in [start, end]."""

        raise NotImplementedError

    def list_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceLog]:
        """Newest clock-in first."""

        raise NotImplementedError

    def create_clock_in(
        self,
        *,
        user_id: int,
        full_name: str,
        email: str,
        clock_in_time: datetime,
        location: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_pause_state(
        self,
        *,
        log_id: int,
        status: SessionStatus,
        events: Sequence[PauseEvent],
        total_paused_minutes: int,
    ) -> bool:
        raise NotImplementedError

    def update_clock_out(self, *, log_id: int, clock_out_time: datetime) -> bool:
        raise NotImplementedError

    # Overdue clock-out reminders

    def list_overdue(self, *, clocked_in_before: datetime) -> Sequence[AttendanceLog]:
        """Open sessions older than the cutoff with no reminder sent yet."""

        raise NotImplementedError

    def set_reminder_token(self, *, log_id: int, token: str, expires_at: datetime, sent_at: datetime) -> bool:
        raise NotImplementedError

    def get_open_by_token(self, token: str) -> Optional[AttendanceLog]:
        raise NotImplementedError

    def redeem_clockout_token(self, *, log_id: int, token: str, clock_out_time: datetime) -> bool:
        """Close the session and clear the token; False when already used."""

        raise NotImplementedError
