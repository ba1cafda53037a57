from __future__ import annotations

from html import escape

from ..attendance.model import AttendanceLog
from ..common.datetime_utils import format_clock_time

REMINDER_SUBJECT = "You forgot to clock out | Quick clock-out option inside"


def reminder_html(log: AttendanceLog, *, clockout_url: str, ttl_hours: int) -> str:
    name = escape(log.full_name or log.email)
    clock_in = escape(format_clock_time(log.clock_in_time))
    url = escape(clockout_url, quote=True)

    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h2 style="color: #333;">Hi {name},</h2>
  <p style="font-size: 16px; line-height: 1.6;">
    It looks like you haven't clocked out today. You can clock out directly from this email.
  </p>
  <div style="background-color: #f8f9fa; padding: 15px; border-radius: 8px; margin: 20px 0;">
    <p style="margin: 0; font-size: 14px; color: #666;">
      <strong>Your clock-in time today:</strong> {clock_in}
    </p>
  </div>
  <div style="text-align: center; margin: 30px 0;">
    <a href="{url}"
       style="background-color: #28a745; color: white; padding: 15px 30px; text-decoration: none;
              border-radius: 8px; font-size: 16px; font-weight: bold; display: inline-block;">
      Clock Out Now
    </a>
  </div>
  <p style="font-size: 14px; color: #666; text-align: center;">
    This will update your attendance in staffdesk.
  </p>
  <hr style="border: none; border-top: 1px solid #eee; margin: 30px 0;">
  <p style="font-size: 12px; color: #999; text-align: center;">
    This link will expire in {int(ttl_hours)} hours for security purposes.
  </p>
</div>
"""
