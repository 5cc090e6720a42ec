"""Brevo transactional email notifier."""

import logging
from datetime import datetime
from typing import Any

import httpx

from rangescan.config import NotifierSettings
from rangescan.errors import NotificationFailure

from .base import Notification

logger = logging.getLogger(__name__)


def _format_html(body: str, now: datetime) -> str:
    formatted = body.replace("\n", "<br>")
    timezone_name = now.tzname() or "Local"
    formatted += f"<br>on {now:%Y-%m-%d %H:%M:%S} in timezone {timezone_name}"
    return f"<html><head></head><body><p>{formatted}</p></body></html>"


def build_payload(
    notification: Notification,
    settings: NotifierSettings,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Build the JSON body for Brevo's send-email endpoint."""
    if now is None:
        now = datetime.now().astimezone()
    return {
        "sender": {"email": settings.sender_email, "name": settings.sender_name},
        "to": [{"email": settings.to_email, "name": settings.to_name}],
        "subject": notification.subject,
        "htmlContent": _format_html(notification.body, now),
        "headers": {"Reply-To": settings.sender_email},
    }


class BrevoNotifier:
    """Sends notifications as emails through the Brevo HTTP API."""

    def __init__(
        self,
        settings: NotifierSettings,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self.timeout = timeout
        self.client = client

    async def send(self, notification: Notification) -> int:
        """POST the notification and return the HTTP status code."""
        payload = build_payload(notification, self.settings)
        headers = {
            "accept": "application/json",
            "api-key": self.settings.api_key,
            "content-type": "application/json",
        }
        try:
            if self.client is not None:
                response = await self.client.post(self.settings.url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.settings.url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise NotificationFailure(
                f"Error sending notification {notification.subject!r}: {exc}"
            ) from exc

        logger.debug(
            "Notification %r delivered with status %d", notification.subject, response.status_code
        )
        return response.status_code
