from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """Login identity; attendance sessions are keyed by ``user_id``."""

    user_id: int
    full_name: str
    email: str
    password_hash: str
    is_active: bool = True
