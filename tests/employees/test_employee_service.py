from __future__ import annotations

import io
from datetime import date

import pytest

from src.staffdesk.staffdesk.core.exceptions import NotFoundError, ValidationError
from src.staffdesk.staffdesk.employees.service import EmployeeService, PhotoUpload


def new_employee(name, email, department, role, **kw):
    return EmployeeService.clean_input(full_name=name, email=email, department=department, role=role, **kw)


@pytest.fixture
def svc(employees_repo, photo_storage):
    s = EmployeeService(employees_repo, photo_storage)
    s.add(new_employee("Ana Lima", "ana@example.com", "Engineering", "Backend Developer"))
    s.add(new_employee("Ben Okafor", "ben@example.com", "Sales", "Account Executive"))
    s.add(new_employee("Chloe Martin", "chloe@example.com", "Engineering", "Engineering Manager"))
    return s


def names(employees):
    return [e.full_name for e in employees]


def test_list_is_newest_first(svc):
    assert names(svc.list_employees()) == ["Chloe Martin", "Ben Okafor", "Ana Lima"]


def test_search_is_case_insensitive_across_fields(svc):
    assert names(svc.list_employees(search="LIMA")) == ["Ana Lima"]
    assert names(svc.list_employees(search="sales")) == ["Ben Okafor"]
    assert names(svc.list_employees(search="@example.com")) == ["Chloe Martin", "Ben Okafor", "Ana Lima"]
    assert names(svc.list_employees(search="manager")) == ["Chloe Martin"]
    assert svc.list_employees(search="nobody") == []


def test_department_filter_combines_with_search(svc):
    assert names(svc.list_employees(department="Engineering")) == ["Chloe Martin", "Ana Lima"]
    assert names(svc.list_employees(search="developer", department="Engineering")) == ["Ana Lima"]
    assert svc.list_employees(search="developer", department="Sales") == []
    assert len(svc.list_employees(department="all")) == 3


def test_departments_are_distinct_and_sorted(svc):
    assert svc.departments() == ["Engineering", "Sales"]


def test_required_fields_are_validated():
    with pytest.raises(ValidationError, match="Full name is required"):
        new_employee("  ", "x@example.com", "Ops", "Analyst")
    with pytest.raises(ValidationError, match="Role is required"):
        new_employee("X", "x@example.com", "Ops", "")
    with pytest.raises(ValidationError, match="valid email"):
        new_employee("X", "not-an-email", "Ops", "Analyst")


def test_clean_input_normalises_optional_fields():
    data = new_employee(" Dee ", "DEE@Example.com", "Ops", "Analyst", phone="  ", joining_date=date(2025, 1, 6))
    assert data.full_name == "Dee"
    assert data.email == "dee@example.com"
    assert data.phone is None
    assert data.joining_date == date(2025, 1, 6)


def test_update_changes_row(svc):
    ben = svc.list_employees(search="ben")[0]
    updated = svc.update(ben.id, new_employee("Ben Okafor", "ben@example.com", "Sales", "Sales Lead", phone="555-0100"))
    assert updated.role == "Sales Lead"
    assert updated.phone == "555-0100"


def test_update_missing_employee(svc):
    with pytest.raises(NotFoundError):
        svc.update(999, new_employee("X", "x@example.com", "Ops", "Analyst"))


def test_delete_removes_from_listing_permanently(svc, photo_storage, png):
    ana = svc.list_employees(search="ana@")[0]
    svc.upload_photo(ana.id, PhotoUpload("ana.png", io.BytesIO(png)))

    svc.delete(ana.id)

    assert "Ana Lima" not in names(svc.list_employees())
    assert photo_storage.files == {}
    with pytest.raises(NotFoundError):
        svc.get(ana.id)
    with pytest.raises(NotFoundError):
        svc.delete(ana.id)


def test_add_with_photo_sets_public_url(employees_repo, photo_storage, png):
    svc = EmployeeService(employees_repo, photo_storage)

    result = svc.add_with_photo(
        new_employee("Dee", "dee@example.com", "Ops", "Analyst"),
        PhotoUpload("dee.PNG", io.BytesIO(png)),
    )

    assert result.photo_error is None
    assert result.employee.profile_picture == f"http://testserver/uploads/profile-pictures/{result.employee.id}.png"
    assert svc.get(result.employee.id).profile_picture == result.employee.profile_picture


def test_failed_photo_upload_keeps_created_employee(employees_repo, photo_storage, png):
    svc = EmployeeService(employees_repo, photo_storage)
    photo_storage.fail = True

    result = svc.add_with_photo(
        new_employee("Dee", "dee@example.com", "Ops", "Analyst"),
        PhotoUpload("dee.png", io.BytesIO(png)),
    )

    assert result.photo_error is not None
    assert "Could not store photo" in result.photo_error
    assert svc.get(result.employee.id).profile_picture is None


def test_non_image_upload_is_reported(employees_repo, photo_storage):
    svc = EmployeeService(employees_repo, photo_storage)

    result = svc.add_with_photo(
        new_employee("Dee", "dee@example.com", "Ops", "Analyst"),
        PhotoUpload("dee.png", io.BytesIO(b"definitely not a png")),
    )

    assert result.photo_error == "The uploaded file is not a valid image"
    assert photo_storage.files == {}


def test_unsupported_extension_is_rejected(svc, png):
    ana = svc.list_employees(search="ana@")[0]
    with pytest.raises(ValidationError, match="Unsupported image type"):
        svc.upload_photo(ana.id, PhotoUpload("ana.bmp", io.BytesIO(png)))


def test_reupload_replaces_previous_photo(svc, photo_storage, png):
    ana = svc.list_employees(search="ana@")[0]
    svc.upload_photo(ana.id, PhotoUpload("ana.png", io.BytesIO(png)))
    svc.upload_photo(ana.id, PhotoUpload("ana.jpg", io.BytesIO(png)))

    assert list(photo_storage.files) == [f"profile-pictures/{ana.id}.jpg"]
    assert svc.get(ana.id).profile_picture.endswith(f"/profile-pictures/{ana.id}.jpg")


def test_change_marker_moves_on_write(svc):
    before = svc.change_marker()
    assert before["count"] == 3

    ben = svc.list_employees(search="ben")[0]
    svc.update(ben.id, new_employee("Ben Okafor", "ben@example.com", "Sales", "Sales Lead"))

    after = svc.change_marker()
    assert after["count"] == 3
    assert after["latest"] != before["latest"]
