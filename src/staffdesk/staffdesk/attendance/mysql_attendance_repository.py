from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json_column, fetchall, fetchone, load_json_column
from .durations import events_from_json
from .model import AttendanceLog, PauseEvent
from .repository import AttendanceRepository

_COLUMNS = """
    id, user_id, full_name, email, clock_in_time, clock_out_time, location, status,
    pause_resume_log, total_paused_minutes, reminder_sent_at, clockout_token,
    token_expires_at, auto_clockout
"""


def _to_log(r: Dict[str, Any]) -> AttendanceLog:
    return AttendanceLog(
        id=int(r["id"]),
        user_id=int(r["user_id"]),
        full_name=r.get("full_name") or "",
        email=r.get("email") or "",
        clock_in_time=r["clock_in_time"],
        clock_out_time=r.get("clock_out_time"),
        status=SessionStatus(r.get("status") or SessionStatus.WORKING.value),
        location=r.get("location"),
        pause_resume_log=events_from_json(load_json_column(r.get("pause_resume_log"))),
        total_paused_minutes=int(r.get("total_paused_minutes") or 0),
        reminder_sent_at=r.get("reminder_sent_at"),
        clockout_token=r.get("clockout_token"),
        token_expires_at=r.get("token_expires_at"),
        auto_clockout=bool(r.get("auto_clockout")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, log_id: int) -> Optional[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_logs WHERE id=%s", (int(log_id),))
            r = fetchone(cur)
            return _to_log(r) if r else None

    def get_for_user_between(self, user_id: int, start: datetime, end: datetime) -> Optional[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_logs
                WHERE user_id=%s AND clock_in_time BETWEEN %s AND %s
                ORDER BY clock_in_time DESC
                LIMIT 1
                """,
                (int(user_id), start, end),
            )
            r = fetchone(cur)
            return _to_log(r) if r else None

    def list_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_logs
                WHERE user_id=%s
                ORDER BY clock_in_time DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [_to_log(r) for r in fetchall(cur)]

    def create_clock_in(
        self,
        *,
        user_id: int,
        full_name: str,
        email: str,
        clock_in_time: datetime,
        location: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_logs(
                    user_id, full_name, email, clock_in_time, location, status,
                    pause_resume_log, total_paused_minutes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    int(user_id),
                    full_name,
                    email,
                    clock_in_time,
                    location,
                    SessionStatus.WORKING.value,
                    dump_json_column([]),
                ),
            )
            return int(cur.lastrowid)

    def update_pause_state(
        self,
        *,
        log_id: int,
        status: SessionStatus,
        events: Sequence[PauseEvent],
        total_paused_minutes: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_logs
                SET status=%s, pause_resume_log=%s, total_paused_minutes=%s
                WHERE id=%s AND clock_out_time IS NULL
                """,
                (
                    status.value,
                    dump_json_column([e.to_json() for e in events]),
                    int(total_paused_minutes),
                    int(log_id),
                ),
            )
            return cur.rowcount > 0

    def update_clock_out(self, *, log_id: int, clock_out_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_logs
                SET clock_out_time=%s, status=%s
                WHERE id=%s AND clock_out_time IS NULL
                """,
                (clock_out_time, SessionStatus.COMPLETED.value, int(log_id)),
            )
            return cur.rowcount > 0

    def list_overdue(self, *, clocked_in_before: datetime) -> Sequence[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_logs
                WHERE clock_out_time IS NULL
                  AND reminder_sent_at IS NULL
                  AND clock_in_time < %s
                ORDER BY clock_in_time ASC
                """,
                (clocked_in_before,),
            )
            return [_to_log(r) for r in fetchall(cur)]

    def set_reminder_token(self, *, log_id: int, token: str, expires_at: datetime, sent_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_logs
                SET clockout_token=%s, token_expires_at=%s, reminder_sent_at=%s
                WHERE id=%s
                """,
                (token, expires_at, sent_at, int(log_id)),
            )
            return cur.rowcount > 0

    def get_open_by_token(self, token: str) -> Optional[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_logs
                WHERE clockout_token=%s AND clock_out_time IS NULL
                """,
                (token,),
            )
            r = fetchone(cur)
            return _to_log(r) if r else None

    def redeem_clockout_token(self, *, log_id: int, token: str, clock_out_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_logs
                SET clock_out_time=%s, status=%s, auto_clockout=1,
                    clockout_token=NULL, token_expires_at=NULL
                WHERE id=%s AND clockout_token=%s AND clock_out_time IS NULL
                """,
                (clock_out_time, SessionStatus.COMPLETED.value, int(log_id), token),
            )
            return cur.rowcount > 0
