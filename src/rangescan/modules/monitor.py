"""Background liveness notifications and elapsed-time reporting."""

import asyncio
import logging
import time
from collections.abc import Callable

from rangescan.modules.notify import Notification, Notifier, send_quietly

logger = logging.getLogger(__name__)


async def wait_or_stop(stop: asyncio.Event, timeout: float) -> bool:
    """Sleep up to timeout seconds; return True if stop was set meanwhile."""
    try:
        await asyncio.wait_for(stop.wait(), timeout=max(timeout, 0.0))
    except TimeoutError:
        return stop.is_set()
    return True


class LivenessNotifier:
    """Periodically tells the operator that the scanner is still running."""

    def __init__(self, notifier: Notifier, interval: float):
        self.notifier = notifier
        self.interval = interval
        self.sent = 0

    async def run(self, stop: asyncio.Event) -> None:
        while not await wait_or_stop(stop, self.interval):
            await send_quietly(self.notifier, Notification(subject="Update", body="Updating..."))
            self.sent += 1


class ElapsedTicker:
    """Reports elapsed wall-clock time at a fixed interval."""

    def __init__(
        self,
        interval: float = 60.0,
        report: Callable[[str], None] | None = None,
    ):
        self.interval = interval
        self.report = report
        self.started = time.monotonic()

    def elapsed_minutes(self) -> float:
        return (time.monotonic() - self.started) / 60

    async def run(self, stop: asyncio.Event) -> None:
        self.started = time.monotonic()
        while not await wait_or_stop(stop, self.interval):
            message = f"Elapsed time: {self.elapsed_minutes():.0f} minutes"
            if self.report is not None:
                self.report(message)
            else:
                logger.info(message)
