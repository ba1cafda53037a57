"""staffdesk package.

Employee directory plus a personal clock-in/clock-out tracker, organized by
feature modules (employees, attendance, reminders, ...) with a thin Flask
controller layer over service/repository layers.
"""
