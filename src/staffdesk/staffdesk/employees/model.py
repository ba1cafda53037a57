from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """A directory entry. Not tied to a login account."""

    id: int
    full_name: str
    email: str
    department: str
    role: str
    phone: Optional[str]
    profile_picture: Optional[str]
    joining_date: Optional[date]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class EmployeeInput:
    """Fields accepted from the add/edit forms."""

    full_name: str
    email: str
    department: str
    role: str
    phone: Optional[str] = None
    joining_date: Optional[date] = None


@dataclass(frozen=True)
class MonthlyJoining:
    month: str
    count: int
    month_start: date
