"""Single TCP-connect probe."""

import asyncio
import logging
from typing import Protocol

from .models import ProbeFailure, ScanResult

logger = logging.getLogger(__name__)


class Dialer(Protocol):
    """Opens and immediately closes a TCP connection, raising on failure."""

    async def connect(self, ip: str, port: int, timeout: float) -> None: ...


class TCPDialer:
    """Dialer backed by asyncio streams."""

    async def connect(self, ip: str, port: int, timeout: float) -> None:
        _, writer = await asyncio.wait_for(asyncio.open_connection(ip, port), timeout=timeout)
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            # Peer reset during close; the connect itself succeeded.
            pass


class Prober:
    """Runs connect attempts through a Dialer under a shared limiter."""

    def __init__(self, dialer: Dialer | None = None):
        self.dialer = dialer if dialer is not None else TCPDialer()

    async def probe(
        self,
        ip: str,
        port: int,
        timeout: float,
        limiter: asyncio.Semaphore,
    ) -> ScanResult:
        """
        Attempt one TCP connect to ip:port.

        Holds one limiter token for the duration of the attempt. Connect
        failures are returned as data on the result, never raised.
        """
        async with limiter:
            try:
                await self.dialer.connect(ip, port, timeout)
            except (OSError, TimeoutError, ValueError, UnicodeError) as exc:
                logger.debug("Probe %s:%d failed: %r", ip, port, exc)
                return ScanResult(ip=ip, port=port, open=False, error=ProbeFailure.from_exception(exc))
        return ScanResult(ip=ip, port=port, open=True)


async def probe(
    ip: str,
    port: int,
    timeout: float,
    limiter: asyncio.Semaphore,
    dialer: Dialer | None = None,
) -> ScanResult:
    """Probe one (ip, port) pair with a throwaway Prober."""
    return await Prober(dialer).probe(ip, port, timeout, limiter)
