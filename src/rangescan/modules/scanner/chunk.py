"""Bounded-concurrency scanning of one address chunk."""

import asyncio
import logging
from collections.abc import AsyncIterator, Iterator

from rangescan.modules.addressing import Chunk

from .models import ScanResult
from .prober import Prober

logger = logging.getLogger(__name__)

MIN_PENDING = 100


def iter_targets(chunk: Chunk, ports: list[int]) -> Iterator[tuple[str, int]]:
    """Yield every (ip, port) pair of a chunk, address-major."""
    if not ports:
        return
    for ip in chunk.addresses():
        for port in ports:
            yield ip, port


async def scan_chunk(
    start: int,
    end: int,
    ports: list[int],
    timeout: float,
    max_concurrent: int,
    prober: Prober | None = None,
) -> AsyncIterator[ScanResult]:
    """
    Probe every address in [start, end] on every port and yield results.

    All probes share one semaphore sized max_concurrent, so the bound holds
    per chunk. Results are yielded in completion order. Probe tasks are
    created from a lazy iterator with a bounded pending window, so huge
    chunks never materialize millions of tasks at once.
    """
    if max_concurrent < 1:
        raise ValueError(f"max_concurrent must be positive, got {max_concurrent}")
    prober = prober if prober is not None else Prober()
    chunk = Chunk(start, end)
    limiter = asyncio.Semaphore(max_concurrent)
    targets = iter_targets(chunk, ports)
    max_pending = max(max_concurrent * 4, MIN_PENDING)
    pending: set[asyncio.Task[ScanResult]] = set()

    logger.info("Scanning chunk from %s to %s", chunk.start_ip, chunk.end_ip)

    def submit_next() -> bool:
        try:
            ip, port = next(targets)
        except StopIteration:
            return False
        pending.add(asyncio.ensure_future(prober.probe(ip, port, timeout, limiter)))
        return True

    try:
        while len(pending) < max_pending and submit_next():
            pass

        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                yield task.result()
            while len(pending) < max_pending and submit_next():
                pass
    finally:
        # Only reached with work left when the consumer stops early or is cancelled.
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
