from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import BinaryIO, Iterable, Optional

from PIL import Image

from ..common.validators import optional_text, require_email, require_non_empty
from ..core.constants import ALLOWED_PHOTO_EXTENSIONS, PHOTO_PREFIX
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..storage.photo_storage import PhotoStorage
from .model import Employee, EmployeeInput
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

ALL_DEPARTMENTS = "all"


@dataclass(frozen=True)
class PhotoUpload:
    filename: str
    stream: BinaryIO


@dataclass(frozen=True)
class AddResult:
    employee: Employee
    photo_error: Optional[str] = None


def filter_employees(
    employees: Iterable[Employee],
    *,
    search: str = "",
    department: str = ALL_DEPARTMENTS,
) -> list[Employee]:
    """Case-insensitive substring search over name, email, department and role."""

    term = (search or "").strip().lower()
    department = department or ALL_DEPARTMENTS

    out: list[Employee] = []
    for e in employees:
        if term and not any(term in field.lower() for field in (e.full_name, e.email, e.department, e.role)):
            continue
        if department != ALL_DEPARTMENTS and e.department != department:
            continue
        out.append(e)
    return out


def photo_extension(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in (filename or "") else ""
    if ext not in ALLOWED_PHOTO_EXTENSIONS:
        allowed = ", ".join(sorted(ALLOWED_PHOTO_EXTENSIONS))
        raise ValidationError(f"Unsupported image type (allowed: {allowed})")
    return ext


def verify_image(stream: BinaryIO) -> None:
    try:
        with Image.open(stream) as img:
            img.verify()
    except (OSError, SyntaxError) as e:
        raise ValidationError("The uploaded file is not a valid image") from e
    finally:
        stream.seek(0)


class EmployeeService:
    """Use case: manage the employee directory."""

    def __init__(self, employees: EmployeeRepository, photos: PhotoStorage):
        self._employees = employees
        self._photos = photos

    @staticmethod
    def clean_input(
        *,
        full_name: str,
        email: str,
        department: str,
        role: str,
        phone: Optional[str] = None,
        joining_date=None,
    ) -> EmployeeInput:
        return EmployeeInput(
            full_name=require_non_empty(full_name, "Full name"),
            email=require_email(email),
            department=require_non_empty(department, "Department"),
            role=require_non_empty(role, "Role"),
            phone=optional_text(phone),
            joining_date=joining_date,
        )

    def list_employees(self, *, search: str = "", department: str = ALL_DEPARTMENTS) -> list[Employee]:
        return filter_employees(self._employees.list_all(), search=search, department=department)

    def departments(self) -> list[str]:
        return sorted({e.department for e in self._employees.list_all() if e.department})

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def add(self, data: EmployeeInput) -> Employee:
        employee_id = self._employees.create(data)
        logger.info("Employee %s created (%s)", employee_id, data.email)
        return self.get(employee_id)

    def add_with_photo(self, data: EmployeeInput, photo: Optional[PhotoUpload]) -> AddResult:
        """Create the row, then upload the photo as a second, independent write.

        A failed upload leaves the employee created without a photo.
        """

        employee = self.add(data)
        if photo is None:
            return AddResult(employee=employee)

        try:
            url = self.upload_photo(employee.id, photo)
        except DomainError as e:
            logger.warning("Photo upload failed for new employee %s: %s", employee.id, e)
            return AddResult(employee=employee, photo_error=str(e))

        return AddResult(employee=self._with_photo(employee, url))

    def update(self, employee_id: int, data: EmployeeInput) -> Employee:
        self.get(employee_id)
        self._employees.update(int(employee_id), data)
        return self.get(employee_id)

    def delete(self, employee_id: int) -> None:
        if not self._employees.delete_by_id(int(employee_id)):
            raise NotFoundError("Employee not found")
        logger.info("Employee %s deleted", employee_id)
        self._photos.delete_prefix(f"{PHOTO_PREFIX}/{int(employee_id)}.")

    def upload_photo(self, employee_id: int, photo: PhotoUpload) -> str:
        ext = photo_extension(photo.filename)
        verify_image(photo.stream)

        self.get(employee_id)
        key = f"{PHOTO_PREFIX}/{int(employee_id)}.{ext}"
        url = self._photos.save(key, photo.stream)
        self._photos.delete_prefix(f"{PHOTO_PREFIX}/{int(employee_id)}.", keep=key)
        self._employees.set_profile_picture(int(employee_id), url)
        return url

    def change_marker(self) -> dict:
        total, latest = self._employees.change_marker()
        return {"count": total, "latest": latest.isoformat() if isinstance(latest, datetime) else None}

    @staticmethod
    def _with_photo(employee: Employee, url: str) -> Employee:
        return replace(employee, profile_picture=url)

