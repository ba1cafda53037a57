from __future__ import annotations

import logging

from flask import Flask, abort, flash, jsonify, redirect, render_template, request, send_from_directory, url_for

from ..common.datetime_utils import now_local, parse_optional_date
from ..container import Container
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..users.guards import login_required
from .service import ALL_DEPARTMENTS, EmployeeService, PhotoUpload

logger = logging.getLogger(__name__)


def _form_input():
    try:
        joining_date = parse_optional_date(request.form.get("joining_date"))
    except ValueError:
        raise ValidationError("Joining date must be YYYY-MM-DD") from None

    return EmployeeService.clean_input(
        full_name=request.form.get("full_name", ""),
        email=request.form.get("email", ""),
        department=request.form.get("department", ""),
        role=request.form.get("role", ""),
        phone=request.form.get("phone"),
        joining_date=joining_date,
    )


def _photo_from_request():
    file = request.files.get("photo")
    if file is None or not file.filename:
        return None
    return PhotoUpload(filename=file.filename, stream=file.stream)


def register(app: Flask, container: Container) -> None:
    @app.route("/employees", endpoint="directory")
    @login_required
    def directory():
        search = request.args.get("q", "").strip()
        department = request.args.get("department", ALL_DEPARTMENTS) or ALL_DEPARTMENTS

        employees = container.employee_service.list_employees(search=search, department=department)
        joining = container.employee_analytics_service.monthly_joining(now=now_local())
        return render_template(
            "employees/list.html",
            employees=employees,
            departments=container.employee_service.departments(),
            search=search,
            department=department,
            all_departments=ALL_DEPARTMENTS,
            joining=joining,
            marker=container.employee_service.change_marker(),
            active_page="directory",
        )

    @app.route("/employees/new", methods=["GET", "POST"], endpoint="employee_add")
    @login_required
    def employee_add():
        if request.method == "POST":
            try:
                data = _form_input()
                result = container.employee_service.add_with_photo(data, _photo_from_request())
                flash(f"Employee {result.employee.full_name} added.", "success")
                if result.photo_error:
                    flash(f"Employee saved, but the photo upload failed: {result.photo_error}", "warning")
                return redirect(url_for("directory"))
            except ValidationError as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("Adding employee failed")
                flash("System error while adding the employee", "danger")

        return render_template("employees/form.html", employee=None, form=request.form, active_page="directory")

    @app.route("/employees/<int:employee_id>/edit", methods=["GET", "POST"], endpoint="employee_edit")
    @login_required
    def employee_edit(employee_id: int):
        try:
            employee = container.employee_service.get(employee_id)
        except NotFoundError:
            abort(404)

        if request.method == "POST":
            try:
                employee = container.employee_service.update(employee_id, _form_input())
                photo = _photo_from_request()
                if photo is None:
                    flash("Employee updated.", "success")
                    return redirect(url_for("directory"))

                # update() has committed; a photo failure is reported, not rolled back.
                try:
                    container.employee_service.upload_photo(employee_id, photo)
                    flash("Employee updated.", "success")
                except DomainError as e:
                    logger.warning("Photo upload failed for employee %s: %s", employee_id, e)
                    flash(f"Employee updated, but the photo upload failed: {e}", "warning")
                return redirect(url_for("directory"))
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "warning")
            except Exception:
                logger.exception("Updating employee %s failed", employee_id)
                flash("System error while updating the employee", "danger")

        form = request.form if request.method == "POST" else None
        return render_template("employees/form.html", employee=employee, form=form, active_page="directory")

    @app.route("/employees/<int:employee_id>/delete", methods=["POST"], endpoint="employee_delete")
    @login_required
    def employee_delete(employee_id: int):
        try:
            container.employee_service.delete(employee_id)
            flash("Employee deleted.", "success")
        except NotFoundError as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("Deleting employee %s failed", employee_id)
            flash("System error while deleting the employee", "danger")
        return redirect(url_for("directory"))

    @app.route("/employees/<int:employee_id>/photo", methods=["POST"], endpoint="employee_photo")
    @login_required
    def employee_photo(employee_id: int):
        photo = _photo_from_request()
        if photo is None:
            flash("Choose an image to upload", "warning")
            return redirect(url_for("employee_edit", employee_id=employee_id))

        try:
            container.employee_service.upload_photo(employee_id, photo)
            flash("Profile photo updated.", "success")
        except (ValidationError, NotFoundError) as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("Photo upload for employee %s failed", employee_id)
            flash("Failed to upload the photo", "danger")
        return redirect(url_for("employee_edit", employee_id=employee_id))

    @app.route("/uploads/<path:filename>", endpoint="uploaded_file")
    def uploaded_file(filename: str):
        return send_from_directory(container.photo_storage.root_dir, filename)

    @app.route("/api/employees/changes", endpoint="api_employee_changes")
    @login_required
    def api_employee_changes():
        return jsonify(container.employee_service.change_marker())

    @app.route("/api/employees/joining", endpoint="api_employee_joining")
    @login_required
    def api_employee_joining():
        rows = container.employee_analytics_service.monthly_joining(now=now_local())
        return jsonify([{"month": r.month, "count": r.count} for r in rows])
