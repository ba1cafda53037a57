from __future__ import annotations

import io
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.staffdesk.staffdesk.attendance.model import AttendanceLog
from src.staffdesk.staffdesk.container import build_services
from src.staffdesk.staffdesk.core.enums import SessionStatus
from src.staffdesk.staffdesk.core.exceptions import EmailDeliveryError, StorageError
from src.staffdesk.staffdesk.employees.model import Employee, EmployeeInput
from src.staffdesk.staffdesk.users.model import User

FIXED_NOW = datetime(2026, 3, 2, 12, 0, 0)


class InMemoryUsers:
    def __init__(self, users: list[User]):
        self._by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._by_id.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.email == email), None)


class InMemoryAttendance:
    def __init__(self):
        self.logs: dict[int, AttendanceLog] = {}
        self._id = 0

    def add(self, log: AttendanceLog) -> AttendanceLog:
        self._id = max(self._id, log.id)
        self.logs[log.id] = log
        return log

    def get_by_id(self, log_id: int) -> Optional[AttendanceLog]:
        return self.logs.get(log_id)

    def get_for_user_between(self, user_id: int, start: datetime, end: datetime) -> Optional[AttendanceLog]:
        matches = [
            log for log in self.logs.values() if log.user_id == user_id and start <= log.clock_in_time <= end
        ]
        matches.sort(key=lambda log: log.clock_in_time, reverse=True)
        return matches[0] if matches else None

    def list_for_user(self, user_id: int, limit: int):
        items = [log for log in self.logs.values() if log.user_id == user_id]
        items.sort(key=lambda log: log.clock_in_time, reverse=True)
        return items[:limit]

    def create_clock_in(self, *, user_id, full_name, email, clock_in_time, location) -> int:
        self._id += 1
        self.logs[self._id] = AttendanceLog(
            id=self._id,
            user_id=user_id,
            full_name=full_name,
            email=email,
            clock_in_time=clock_in_time,
            clock_out_time=None,
            status=SessionStatus.WORKING,
            location=location,
        )
        return self._id

    def update_pause_state(self, *, log_id, status, events, total_paused_minutes) -> bool:
        log = self.logs.get(log_id)
        if not log or not log.is_open:
            return False
        self.logs[log_id] = replace(
            log, status=status, pause_resume_log=tuple(events), total_paused_minutes=total_paused_minutes
        )
        return True

    def update_clock_out(self, *, log_id, clock_out_time) -> bool:
        log = self.logs.get(log_id)
        if not log or not log.is_open:
            return False
        self.logs[log_id] = replace(log, clock_out_time=clock_out_time, status=SessionStatus.COMPLETED)
        return True

    def list_overdue(self, *, clocked_in_before):
        return [
            log
            for log in sorted(self.logs.values(), key=lambda log: log.clock_in_time)
            if log.is_open and log.reminder_sent_at is None and log.clock_in_time < clocked_in_before
        ]

    def set_reminder_token(self, *, log_id, token, expires_at, sent_at) -> bool:
        log = self.logs.get(log_id)
        if not log:
            return False
        self.logs[log_id] = replace(log, clockout_token=token, token_expires_at=expires_at, reminder_sent_at=sent_at)
        return True

    def get_open_by_token(self, token):
        return next((log for log in self.logs.values() if log.clockout_token == token and log.is_open), None)

    def redeem_clockout_token(self, *, log_id, token, clock_out_time) -> bool:
        log = self.logs.get(log_id)
        if not log or not log.is_open or log.clockout_token != token:
            return False
        self.logs[log_id] = replace(
            log,
            clock_out_time=clock_out_time,
            status=SessionStatus.COMPLETED,
            auto_clockout=True,
            clockout_token=None,
            token_expires_at=None,
        )
        return True


class InMemoryEmployees:
    def __init__(self):
        self.rows: dict[int, Employee] = {}
        self._id = 0
        self._clock = FIXED_NOW

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def list_all(self):
        return sorted(self.rows.values(), key=lambda e: (e.created_at, e.id), reverse=True)

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.rows.get(employee_id)

    def create(self, data: EmployeeInput) -> int:
        self._id += 1
        at = self._tick()
        self.rows[self._id] = Employee(
            id=self._id,
            full_name=data.full_name,
            email=data.email,
            department=data.department,
            role=data.role,
            phone=data.phone,
            profile_picture=None,
            joining_date=data.joining_date,
            created_at=at,
            updated_at=at,
        )
        return self._id

    def update(self, employee_id: int, data: EmployeeInput) -> bool:
        e = self.rows.get(employee_id)
        if not e:
            return False
        self.rows[employee_id] = replace(
            e,
            full_name=data.full_name,
            email=data.email,
            department=data.department,
            role=data.role,
            phone=data.phone,
            joining_date=data.joining_date,
            updated_at=self._tick(),
        )
        return True

    def set_profile_picture(self, employee_id: int, url) -> bool:
        e = self.rows.get(employee_id)
        if not e:
            return False
        self.rows[employee_id] = replace(e, profile_picture=url, updated_at=self._tick())
        return True

    def delete_by_id(self, employee_id: int) -> bool:
        return self.rows.pop(employee_id, None) is not None

    def change_marker(self):
        latest = max((e.updated_at for e in self.rows.values()), default=None)
        return len(self.rows), latest


class InMemoryPhotoStorage:
    def __init__(self, root_dir="/tmp/staffdesk-test-uploads"):
        self.root_dir = root_dir
        self.files: dict[str, bytes] = {}
        self.fail = False

    def save(self, key, stream) -> str:
        if self.fail:
            raise StorageError("Could not store photo: disk full")
        self.files[key] = stream.read()
        return f"http://testserver/uploads/{key}"

    def delete_prefix(self, prefix, *, keep=None) -> int:
        doomed = [k for k in self.files if k.startswith(prefix) and k != keep]
        for k in doomed:
            del self.files[k]
        return len(doomed)


class RecordingMailer:
    def __init__(self):
        self.sent: list[dict] = []
        self.fail_for: set[str] = set()

    def send_html(self, *, to, subject, html) -> str:
        if to in self.fail_for:
            raise EmailDeliveryError("Failed to send email")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return f"msg-{len(self.sent)}"


def png_bytes() -> bytes:
    from PIL import Image

    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color=(16, 185, 129)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def users_repo():
    return InMemoryUsers(
        [
            User(
                user_id=1,
                full_name="Priya Raman",
                email="priya@staffdesk.local",
                password_hash=generate_password_hash("staff123"),
            ),
            User(
                user_id=2,
                full_name="Jonas Berg",
                email="jonas@staffdesk.local",
                password_hash=generate_password_hash("staff123"),
            ),
        ]
    )


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def employees_repo():
    return InMemoryEmployees()


@pytest.fixture
def photo_storage():
    return InMemoryPhotoStorage()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def png():
    return png_bytes()


@pytest.fixture
def container(users_repo, employees_repo, attendance_repo, photo_storage, mailer):
    return build_services(
        conn=None,
        users_repo=users_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        photo_storage=photo_storage,
        mailer=mailer,
        public_base_url="http://testserver",
    )
