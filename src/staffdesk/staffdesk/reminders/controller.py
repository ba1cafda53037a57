from __future__ import annotations

import hmac
import logging

from flask import Flask, jsonify, render_template, request

from ..common.datetime_utils import format_clock_time
from ..container import Container
from ..core.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/attendance/email-clockout", methods=["GET"], endpoint="email_clockout")
    def email_clockout():
        """Redeem the single-use link from the overdue reminder e-mail (no login needed)."""

        token = (request.args.get("token") or "").strip()
        if not token:
            return render_template("attendance/email_clockout_error.html", message="Invalid or missing token"), 400

        try:
            result = container.reminder_service.clock_out_with_token(token)
        except InvalidTokenError as e:
            return render_template("attendance/email_clockout_error.html", message=str(e)), 400
        except Exception:
            logger.exception("Email clock-out failed")
            return (
                render_template(
                    "attendance/email_clockout_error.html",
                    message="Something went wrong while clocking you out. Please try again from the app.",
                ),
                500,
            )

        return render_template(
            "attendance/email_clockout_success.html",
            name=result.log.full_name or result.log.email,
            clock_in=format_clock_time(result.log.clock_in_time),
            clock_out=format_clock_time(result.clock_out_time),
        )

    @app.route("/internal/overdue-clockouts/check", methods=["POST"], endpoint="check_overdue_clockouts")
    def check_overdue_clockouts():
        expected = str(app.config.get("CRON_SECRET") or "")
        supplied = request.headers.get("X-Cron-Secret", "")
        if not expected or not hmac.compare_digest(expected, supplied):
            return jsonify({"success": False, "message": "Forbidden"}), 403

        try:
            results = container.reminder_service.check_overdue()
        except Exception as e:
            logger.exception("Overdue clock-out check failed")
            return jsonify({"success": False, "error": str(e)}), 500

        return jsonify({"success": True, "processed": len(results), "results": [r.to_json() for r in results]})
