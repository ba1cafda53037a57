from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import urlencode

from ..attendance.model import AttendanceLog
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local, whole_seconds
from ..core.constants import DEFAULT_OVERDUE_HOURS, DEFAULT_TOKEN_TTL_HOURS
from ..core.exceptions import InvalidTokenError
from ..mail.mailer import Mailer
from .email_content import REMINDER_SUBJECT, reminder_html

logger = logging.getLogger(__name__)

CLOCKOUT_PATH = "/attendance/email-clockout"


@dataclass(frozen=True)
class ReminderResult:
    id: int
    success: bool
    error: Optional[str] = None

    def to_json(self) -> dict:
        out: dict = {"id": self.id, "success": self.success}
        if self.error:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class TokenClockout:
    log: AttendanceLog
    clock_out_time: datetime


class OverdueClockoutService:
    """Scheduled job: e-mail a single-use clock-out link for sessions left open too long."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        mailer: Mailer,
        *,
        public_base_url: str,
        overdue_hours: int = DEFAULT_OVERDUE_HOURS,
        token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
    ):
        self._attendance = attendance
        self._mailer = mailer
        self._public_base_url = public_base_url.rstrip("/")
        self._overdue_hours = int(overdue_hours)
        self._token_ttl_hours = int(token_ttl_hours)

    def clockout_url(self, token: str) -> str:
        return f"{self._public_base_url}{CLOCKOUT_PATH}?{urlencode({'token': token})}"

    def check_overdue(self, *, now: datetime | None = None) -> list[ReminderResult]:
        now = whole_seconds(now or now_local())
        cutoff = now - timedelta(hours=self._overdue_hours)

        overdue = self._attendance.list_overdue(clocked_in_before=cutoff)
        logger.info("Found %d overdue clock-outs (cutoff %s)", len(overdue), cutoff.isoformat())

        results: list[ReminderResult] = []
        for log in overdue:
            results.append(self._remind(log, now=now))
        return results

    def _remind(self, log: AttendanceLog, *, now: datetime) -> ReminderResult:
        token = secrets.token_urlsafe(32)
        expires_at = now + timedelta(hours=self._token_ttl_hours)

        try:
            if not self._attendance.set_reminder_token(log_id=log.id, token=token, expires_at=expires_at, sent_at=now):
                return ReminderResult(id=log.id, success=False, error="Attendance record not found")

            html = reminder_html(log, clockout_url=self.clockout_url(token), ttl_hours=self._token_ttl_hours)
            self._mailer.send_html(to=log.email, subject=REMINDER_SUBJECT, html=html)
        except Exception as e:
            # One bad row must not stop the rest of the batch.
            logger.exception("Reminder failed for attendance log %s", log.id)
            return ReminderResult(id=log.id, success=False, error=str(e))

        logger.info("Clock-out reminder sent for attendance log %s", log.id)
        return ReminderResult(id=log.id, success=True)

    def clock_out_with_token(self, token: Optional[str], *, now: datetime | None = None) -> TokenClockout:
        now = whole_seconds(now or now_local())

        token = (token or "").strip()
        if not token:
            raise InvalidTokenError("Invalid or missing token")

        log = self._attendance.get_open_by_token(token)
        if not log:
            raise InvalidTokenError("Invalid or expired token")

        if log.token_expires_at is None or now > log.token_expires_at:
            raise InvalidTokenError("This clock-out link has expired")

        if not self._attendance.redeem_clockout_token(log_id=log.id, token=token, clock_out_time=now):
            raise InvalidTokenError("Invalid or expired token")

        logger.info("User %s clocked out via email link (log %s)", log.user_id, log.id)
        return TokenClockout(log=log, clock_out_time=now)
