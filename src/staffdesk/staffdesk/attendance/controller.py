from __future__ import annotations

import logging

from flask import Flask, abort, flash, redirect, render_template, request, session, url_for

from ..common.datetime_utils import now_local
from ..container import Container
from ..core.constants import GEOLOCATION_TIMEOUT_MS
from ..core.enums import MarkerColor
from ..core.exceptions import ValidationError
from ..maps.location import location_from_form
from ..users.guards import login_required

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _map_for(log):
        # Open sessions pin the clock-in spot in green, finished ones in blue.
        marker = MarkerColor.GREEN if log.is_open else MarkerColor.BLUE
        return container.map_renderer.render(log.location, marker)

    def _transition(action, success_message: str, failure_message: str):
        try:
            action(int(session["user_id"]))
            flash(success_message, "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("%s (user %s)", failure_message, session.get("user_id"))
            flash(failure_message, "danger")
        return redirect(url_for("dashboard"))

    @app.route("/attendance", endpoint="dashboard")
    @login_required
    def dashboard():
        user_id = int(session["user_id"])
        now = now_local()

        today = container.attendance_service.get_today(user_id, now=now)
        history = container.attendance_service.history(user_id, now=now)

        return render_template(
            "attendance/dashboard.html",
            name=session.get("name"),
            today=today,
            today_ui=container.attendance_service.to_ui(today, now=now) if today else None,
            today_map=_map_for(today) if today else None,
            history=[container.attendance_service.to_ui(log, now=now) for log in history],
            geolocation_timeout_ms=GEOLOCATION_TIMEOUT_MS,
            active_page="dashboard",
        )

    @app.route("/attendance/<int:log_id>", endpoint="attendance_log")
    @login_required
    def attendance_log(log_id: int):
        try:
            log = container.attendance_service.get_log(int(session["user_id"]), log_id)
        except ValidationError:
            abort(404)

        return render_template(
            "attendance/log.html",
            log=log,
            row=container.attendance_service.to_ui(log),
            map_view=_map_for(log),
            active_page="dashboard",
        )

    @app.route("/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    def clock_in():
        location = location_from_form(request.form.get("lat"), request.form.get("lng"))
        return _transition(
            lambda user_id: container.attendance_service.clock_in(user_id, location=location),
            "Clocked in successfully!" if location else "Clocked in successfully (location not available).",
            "Failed to clock in",
        )

    @app.route("/attendance/pause", methods=["POST"], endpoint="pause_work")
    @login_required
    def pause_work():
        return _transition(container.attendance_service.pause, "Work paused.", "Failed to pause work")

    @app.route("/attendance/resume", methods=["POST"], endpoint="resume_work")
    @login_required
    def resume_work():
        return _transition(container.attendance_service.resume, "Work resumed.", "Failed to resume work")

    @app.route("/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    def clock_out():
        return _transition(container.attendance_service.clock_out, "Clocked out successfully!", "Failed to clock out")
