"""Email notification channel backed by the SendGrid v3 API."""

import html
import logging
from typing import Protocol

import httpx

from eventlens.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"

# Delivery timeout in seconds
DELIVERY_TIMEOUT = 30


class NotificationChannel(Protocol):
    def deliver(self, address: str, subject: str, body: str) -> bool: ...


def render_html(subject: str, body: str) -> str:
    """Render a plain-text notification as a minimal HTML email."""
    paragraphs = "".join(
        f"<p>{html.escape(part)}</p>" for part in body.split("\n\n") if part.strip()
    )
    return f"<h1>{html.escape(subject)}</h1>{paragraphs}"


class SendGridEmailChannel:
    """Best-effort email delivery through SendGrid.

    ``deliver`` returns True once SendGrid accepts the message and raises
    ``ExternalServiceError`` for anything else, including a missing API key.
    """

    def __init__(
        self,
        api_key: str,
        sender: str,
        timeout: int = DELIVERY_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout
        self.transport = transport

    def deliver(self, address: str, subject: str, body: str) -> bool:
        if not self.api_key:
            logger.error("SENDGRID_API_KEY not configured")
            raise ExternalServiceError("Email service not configured")

        payload = {
            "personalizations": [{"to": [{"email": address}]}],
            "from": {"email": self.sender},
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": body},
                {"type": "text/html", "value": render_html(subject, body)},
            ],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.post(SENDGRID_SEND_URL, json=payload, headers=headers)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"SendGrid delivery to {address} failed: {e}")
            raise ExternalServiceError(f"Failed to send email: {e}") from e

        logger.info(f"Email sent to {address} ({resp.status_code})")
        return True
