from __future__ import annotations

import base64
import logging
from email.mime.text import MIMEText
from typing import Optional

import requests

from ..core.exceptions import EmailDeliveryError
from .mailer import Mailer

logger = logging.getLogger(__name__)


class GmailMailer(Mailer):
    """Gmail REST API sender authenticated with an OAuth refresh token."""

    TOKEN_URL = "https://oauth2.googleapis.com/token"
    SEND_URL = "https://gmail.googleapis.com/gmail/v1/users/me/messages/send"

    def __init__(
        self,
        *,
        client_id: Optional[str],
        client_secret: Optional[str],
        refresh_token: Optional[str],
        sender: Optional[str] = None,
        timeout: int = 20,
        session: Optional[requests.Session] = None,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._sender = sender
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._client_secret and self._refresh_token)

    def _access_token(self) -> str:
        if not self.configured:
            raise EmailDeliveryError("Gmail API credentials not configured")

        try:
            response = self._session.post(
                self.TOKEN_URL,
                data={
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "refresh_token": self._refresh_token,
                    "grant_type": "refresh_token",
                },
                timeout=self._timeout,
            )
            payload = response.json() if response.content else {}
        except (requests.RequestException, ValueError) as e:
            raise EmailDeliveryError("Failed to authenticate with Gmail API") from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            logger.error("Gmail token exchange failed: status=%s body=%s", response.status_code, payload)
            raise EmailDeliveryError("Failed to authenticate with Gmail API")
        return token

    def build_raw_message(self, *, to: str, subject: str, html: str) -> str:
        msg = MIMEText(html, "html", "utf-8")
        msg["To"] = to
        msg["Subject"] = subject
        if self._sender:
            msg["From"] = self._sender
        return base64.urlsafe_b64encode(msg.as_bytes()).decode("ascii").rstrip("=")

    def send_html(self, *, to: str, subject: str, html: str) -> str:
        access_token = self._access_token()
        raw = self.build_raw_message(to=to, subject=subject, html=html)

        try:
            response = self._session.post(
                self.SEND_URL,
                json={"raw": raw},
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self._timeout,
            )
            response.raise_for_status()
            result = response.json() if response.content else {}
        except requests.RequestException as e:
            logger.error("Gmail API error while sending to %s: %s", to, e)
            raise EmailDeliveryError("Failed to send email") from e
        except ValueError as e:
            raise EmailDeliveryError("Unreadable response from Gmail API") from e

        message_id = str(result.get("id") or "")
        logger.info("Email sent to %s (id=%s)", to, message_id or "-")
        return message_id
