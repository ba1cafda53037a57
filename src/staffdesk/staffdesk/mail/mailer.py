from __future__ import annotations

from typing import Protocol


class Mailer(Protocol):
    def send_html(self, *, to: str, subject: str, html: str) -> str:
        """Send one HTML message and return the provider's message id."""

        raise NotImplementedError
