from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import PauseEventType, SessionStatus


@dataclass(frozen=True)
class PauseEvent:
    """One entry of the append-only pause/resume log."""

    type: PauseEventType
    timestamp: datetime

    def to_json(self) -> dict:
        return {"type": self.type.value, "timestamp": self.timestamp.isoformat()}


@dataclass(frozen=True)
class AttendanceLog:
    """Domain entity: one work session (one attendance_logs row)."""

    id: int
    user_id: int
    full_name: str
    email: str
    clock_in_time: datetime
    clock_out_time: Optional[datetime]
    status: SessionStatus
    location: Optional[str] = None
    pause_resume_log: tuple[PauseEvent, ...] = field(default_factory=tuple)
    total_paused_minutes: int = 0
    reminder_sent_at: Optional[datetime] = None
    clockout_token: Optional[str] = None
    token_expires_at: Optional[datetime] = None
    auto_clockout: bool = False

    @property
    def is_open(self) -> bool:
        return self.clock_out_time is None
