"""Outbound notifications: Brevo email delivery and a logging fallback."""

from .base import FAILED_STATUS, LogNotifier, Notification, Notifier, send_quietly
from .brevo import BrevoNotifier, build_payload

__all__ = [
    "FAILED_STATUS",
    "BrevoNotifier",
    "LogNotifier",
    "Notification",
    "Notifier",
    "build_payload",
    "send_quietly",
]
