from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee, EmployeeInput
from .repository import EmployeeRepository

_COLUMNS = """
    id, full_name, email, department, role, phone, profile_picture,
    joining_date, created_at, updated_at
"""


def _to_employee(r: Dict[str, Any]) -> Employee:
    return Employee(
        id=int(r["id"]),
        full_name=r.get("full_name") or "",
        email=r.get("email") or "",
        department=r.get("department") or "",
        role=r.get("role") or "",
        phone=r.get("phone") or None,
        profile_picture=r.get("profile_picture") or None,
        joining_date=r.get("joining_date"),
        created_at=r["created_at"],
        updated_at=r.get("updated_at") or r["created_at"],
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY created_at DESC, id DESC")
            return [_to_employee(r) for r in fetchall(cur)]

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def create(self, data: EmployeeInput) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(full_name, email, department, role, phone, joining_date)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (data.full_name, data.email, data.department, data.role, data.phone, data.joining_date),
            )
            return int(cur.lastrowid)

    def update(self, employee_id: int, data: EmployeeInput) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET full_name=%s, email=%s, department=%s, role=%s, phone=%s, joining_date=%s,
                    updated_at=CURRENT_TIMESTAMP
                WHERE id=%s
                """,
                (
                    data.full_name,
                    data.email,
                    data.department,
                    data.role,
                    data.phone,
                    data.joining_date,
                    int(employee_id),
                ),
            )
            return cur.rowcount > 0

    def set_profile_picture(self, employee_id: int, url: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET profile_picture=%s, updated_at=CURRENT_TIMESTAMP WHERE id=%s",
                (url, int(employee_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE id=%s", (int(employee_id),))
            return cur.rowcount > 0

    def change_marker(self) -> tuple[int, Optional[datetime]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total, MAX(updated_at) AS latest FROM employees")
            r = fetchone(cur) or {}
            return int(r.get("total") or 0), r.get("latest")
