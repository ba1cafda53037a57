from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from ..core.constants import JOINING_CHART_MONTHS
from .model import Employee, MonthlyJoining
from .repository import EmployeeRepository


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def monthly_joining(
    employees: Iterable[Employee],
    *,
    now: datetime,
    months: int = JOINING_CHART_MONTHS,
) -> list[MonthlyJoining]:
    """Joiners per calendar month for the last ``months`` months, oldest first.

    Employees without a joining date are ignored.
    """

    counts: dict[tuple[int, int], int] = {}
    for e in employees:
        if e.joining_date:
            key = (e.joining_date.year, e.joining_date.month)
            counts[key] = counts.get(key, 0) + 1

    out: list[MonthlyJoining] = []
    for back in range(months - 1, -1, -1):
        year, month = _shift_month(now.year, now.month, -back)
        start = date(year, month, 1)
        out.append(
            MonthlyJoining(
                month=start.strftime("%b %Y"),
                count=counts.get((year, month), 0),
                month_start=start,
            )
        )
    return out


class EmployeeAnalyticsService:
    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def monthly_joining(self, *, now: datetime) -> list[MonthlyJoining]:
        return monthly_joining(self._employees.list_all(), now=now)
