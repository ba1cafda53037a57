from __future__ import annotations

from enum import Enum


class SessionStatus(str, Enum):
    """Lifecycle state of a work session (one attendance_logs row)."""

    WORKING = "working"
    PAUSED = "paused"
    COMPLETED = "completed"


class PauseEventType(str, Enum):
    PAUSE = "pause"
    RESUME = "resume"


class MarkerColor(str, Enum):
    """Map marker colours: green for clock-in, blue for clock-out."""

    GREEN = "green"
    BLUE = "blue"
