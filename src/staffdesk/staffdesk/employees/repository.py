from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Employee, EmployeeInput


class EmployeeRepository(Protocol):
    def list_all(self) -> Sequence[Employee]:
        """All employees, newest first."""

        raise NotImplementedError

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def create(self, data: EmployeeInput) -> int:
        raise NotImplementedError

    def update(self, employee_id: int, data: EmployeeInput) -> bool:
        raise NotImplementedError

    def set_profile_picture(self, employee_id: int, url: Optional[str]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, employee_id: int) -> bool:
        raise NotImplementedError

    def change_marker(self) -> tuple[int, Optional[datetime]]:
        """(row count, latest updated_at) used by the directory poller."""

        raise NotImplementedError
