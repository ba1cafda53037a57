from __future__ import annotations

from datetime import datetime, timedelta
from urllib.parse import parse_qs, urlparse

import pytest

from src.staffdesk.staffdesk.attendance.model import AttendanceLog
from src.staffdesk.staffdesk.core.enums import SessionStatus
from src.staffdesk.staffdesk.core.exceptions import InvalidTokenError
from src.staffdesk.staffdesk.reminders.email_content import REMINDER_SUBJECT
from src.staffdesk.staffdesk.reminders.service import OverdueClockoutService

NOW = datetime(2026, 3, 2, 19, 0, 0)


def open_log(log_id, user_id, email, clock_in, **kw):
    return AttendanceLog(
        id=log_id,
        user_id=user_id,
        full_name=kw.pop("full_name", "Priya Raman"),
        email=email,
        clock_in_time=clock_in,
        clock_out_time=None,
        status=kw.pop("status", SessionStatus.WORKING),
        **kw,
    )


@pytest.fixture
def svc(attendance_repo, mailer):
    return OverdueClockoutService(attendance_repo, mailer, public_base_url="https://hr.example.com/")


def token_from(html: str) -> str:
    start = html.index("https://hr.example.com/attendance/email-clockout?token=")
    url = html[start:html.index('"', start)]
    return parse_qs(urlparse(url).query)["token"][0]


def test_overdue_session_gets_token_and_email(svc, attendance_repo, mailer):
    attendance_repo.add(open_log(1, 1, "priya@staffdesk.local", NOW - timedelta(hours=10)))

    results = svc.check_overdue(now=NOW)

    assert [r.to_json() for r in results] == [{"id": 1, "success": True}]
    log = attendance_repo.get_by_id(1)
    assert log.reminder_sent_at == NOW
    assert log.token_expires_at == NOW + timedelta(hours=12)
    assert log.clockout_token
    assert log.is_open

    (mail,) = mailer.sent
    assert mail["to"] == "priya@staffdesk.local"
    assert mail["subject"] == REMINDER_SUBJECT
    assert "Hi Priya Raman" in mail["html"]
    assert "9:00 AM" in mail["html"]
    assert "expire in 12 hours" in mail["html"]
    assert token_from(mail["html"]) == log.clockout_token


def test_recent_and_already_reminded_sessions_are_skipped(svc, attendance_repo, mailer):
    attendance_repo.add(open_log(1, 1, "a@example.com", NOW - timedelta(hours=2)))
    attendance_repo.add(open_log(2, 2, "b@example.com", NOW - timedelta(hours=11), reminder_sent_at=NOW - timedelta(hours=1)))

    assert svc.check_overdue(now=NOW) == []
    assert mailer.sent == []


def test_paused_sessions_are_also_reminded(svc, attendance_repo):
    attendance_repo.add(open_log(1, 1, "a@example.com", NOW - timedelta(hours=10), status=SessionStatus.PAUSED))
    assert [r.success for r in svc.check_overdue(now=NOW)] == [True]


def test_mail_failure_is_recorded_and_does_not_stop_batch(svc, attendance_repo, mailer):
    attendance_repo.add(open_log(1, 1, "bounce@example.com", NOW - timedelta(hours=12)))
    attendance_repo.add(open_log(2, 2, "ok@example.com", NOW - timedelta(hours=10)))
    mailer.fail_for.add("bounce@example.com")

    results = {r.id: r for r in svc.check_overdue(now=NOW)}

    assert results[1].success is False
    assert results[1].error == "Failed to send email"
    assert results[1].to_json() == {"id": 1, "success": False, "error": "Failed to send email"}
    assert results[2].success is True
    assert [m["to"] for m in mailer.sent] == ["ok@example.com"]
    # The reminder is stamped before sending, so the job does not retry it.
    assert attendance_repo.get_by_id(1).reminder_sent_at == NOW


def test_valid_token_closes_session(svc, attendance_repo):
    attendance_repo.add(
        open_log(1, 1, "a@example.com", NOW - timedelta(hours=10), clockout_token="tok", token_expires_at=NOW + timedelta(hours=12))
    )

    result = svc.clock_out_with_token("tok", now=NOW)

    assert result.clock_out_time == NOW
    log = attendance_repo.get_by_id(1)
    assert log.status == SessionStatus.COMPLETED
    assert log.clock_out_time == NOW
    assert log.auto_clockout is True
    assert log.clockout_token is None
    assert log.token_expires_at is None


def test_token_is_single_use(svc, attendance_repo):
    attendance_repo.add(
        open_log(1, 1, "a@example.com", NOW - timedelta(hours=10), clockout_token="tok", token_expires_at=NOW + timedelta(hours=12))
    )
    svc.clock_out_with_token("tok", now=NOW)

    with pytest.raises(InvalidTokenError, match="Invalid or expired token"):
        svc.clock_out_with_token("tok", now=NOW + timedelta(minutes=1))


def test_expired_token_is_rejected_and_session_stays_open(svc, attendance_repo):
    attendance_repo.add(
        open_log(1, 1, "a@example.com", NOW - timedelta(hours=22), clockout_token="tok", token_expires_at=NOW - timedelta(seconds=1))
    )

    with pytest.raises(InvalidTokenError, match="expired"):
        svc.clock_out_with_token("tok", now=NOW)

    log = attendance_repo.get_by_id(1)
    assert log.is_open
    assert log.status == SessionStatus.WORKING
    assert log.clockout_token == "tok"


def test_token_at_expiry_instant_is_still_accepted(svc, attendance_repo):
    attendance_repo.add(
        open_log(1, 1, "a@example.com", NOW - timedelta(hours=21), clockout_token="tok", token_expires_at=NOW)
    )
    svc.clock_out_with_token("tok", now=NOW)
    assert not attendance_repo.get_by_id(1).is_open


@pytest.mark.parametrize("token, message", [(None, "missing"), ("   ", "missing"), ("nope", "Invalid or expired")])
def test_missing_or_unknown_token(svc, token, message):
    with pytest.raises(InvalidTokenError, match=message):
        svc.clock_out_with_token(token, now=NOW)


def test_full_flow_from_email_link(svc, attendance_repo, mailer):
    attendance_repo.add(open_log(1, 1, "a@example.com", NOW - timedelta(hours=9, minutes=30)))
    svc.check_overdue(now=NOW)

    token = token_from(mailer.sent[0]["html"])
    svc.clock_out_with_token(token, now=NOW + timedelta(hours=1))

    assert attendance_repo.get_by_id(1).clock_out_time == NOW + timedelta(hours=1)
