from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_OVERDUE_HOURS, DEFAULT_TOKEN_TTL_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .employees.analytics import EmployeeAnalyticsService
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .mail.gmail import GmailMailer
from .mail.mailer import Mailer
from .maps.renderer import MapRenderer, OpenStreetMapRenderer
from .reminders.service import OverdueClockoutService
from .storage.local_photo_storage import LocalPhotoStorage
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository

    photo_storage: LocalPhotoStorage
    map_renderer: MapRenderer
    mailer: Mailer

    auth_service: AuthService
    employee_service: EmployeeService
    employee_analytics_service: EmployeeAnalyticsService
    attendance_service: AttendanceService
    reminder_service: OverdueClockoutService


def build_services(
    *,
    conn: Optional[DatabaseConnection],
    users_repo: UserRepository,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    photo_storage: LocalPhotoStorage,
    mailer: Mailer,
    public_base_url: str,
    map_renderer: Optional[MapRenderer] = None,
    overdue_hours: int = DEFAULT_OVERDUE_HOURS,
    token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
    history_limit: int = DEFAULT_HISTORY_LIMIT,
) -> Container:
    """Wire services on top of already-built repositories (tests pass in-memory ones)."""

    return Container(
        conn=conn,
        users_repo=users_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        photo_storage=photo_storage,
        map_renderer=map_renderer or OpenStreetMapRenderer(),
        mailer=mailer,
        auth_service=AuthService(users_repo),
        employee_service=EmployeeService(employees_repo, photo_storage),
        employee_analytics_service=EmployeeAnalyticsService(employees_repo),
        attendance_service=AttendanceService(attendance_repo, users_repo, history_limit=history_limit),
        reminder_service=OverdueClockoutService(
            attendance_repo,
            mailer,
            public_base_url=public_base_url,
            overdue_hours=overdue_hours,
            token_ttl_hours=token_ttl_hours,
        ),
    )


def build_container(*, db_config: dict, settings: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    public_base_url = str(getattr(settings, "PUBLIC_BASE_URL", "http://localhost:5000")).rstrip("/")

    return build_services(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        photo_storage=LocalPhotoStorage(Path(getattr(settings, "UPLOAD_FOLDER")), f"{public_base_url}/uploads"),
        mailer=GmailMailer(
            client_id=getattr(settings, "GOOGLE_CLIENT_ID", None),
            client_secret=getattr(settings, "GOOGLE_CLIENT_SECRET", None),
            refresh_token=getattr(settings, "GOOGLE_REFRESH_TOKEN", None),
            sender=getattr(settings, "MAIL_SENDER", None),
        ),
        public_base_url=public_base_url,
        overdue_hours=int(getattr(settings, "OVERDUE_HOURS", DEFAULT_OVERDUE_HOURS)),
        token_ttl_hours=int(getattr(settings, "TOKEN_TTL_HOURS", DEFAULT_TOKEN_TTL_HOURS)),
    )
