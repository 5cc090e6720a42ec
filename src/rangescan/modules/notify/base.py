"""Notifier protocol and shared helpers."""

import logging
from dataclasses import dataclass
from typing import Protocol

from rangescan.errors import NotificationFailure

logger = logging.getLogger(__name__)

FAILED_STATUS = 500


@dataclass(frozen=True)
class Notification:
    """A subject/body message for the operator."""

    subject: str
    body: str


class Notifier(Protocol):
    """Delivers notifications and returns a delivery status code."""

    async def send(self, notification: Notification) -> int: ...


class LogNotifier:
    """Notifier that only writes notifications to the log."""

    async def send(self, notification: Notification) -> int:
        logger.info("Notification [%s] %s", notification.subject, notification.body)
        return 200


async def send_quietly(notifier: Notifier, notification: Notification) -> int:
    """
    Send a notification without letting failures escape.

    Delivery is best effort: failures are logged and reported as status 500.
    """
    try:
        status = await notifier.send(notification)
    except NotificationFailure as exc:
        logger.warning("%s", exc)
        return FAILED_STATUS
    except Exception:
        logger.warning("Failed to send notification %r", notification.subject, exc_info=True)
        return FAILED_STATUS
    if status >= 400:
        logger.warning("Notification %r returned status %d", notification.subject, status)
    return status
