"""Chunked, checkpointed scanning of a full address range."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from rangescan.errors import InvalidRange, PersistenceError, ScanError
from rangescan.modules.addressing import (
    Chunk,
    address_to_int,
    int_to_address,
    iter_chunks,
    range_size,
)
from rangescan.modules.checkpoint import CheckpointStore
from rangescan.modules.notify import Notification, Notifier, send_quietly
from rangescan.modules.ports import format_ports
from rangescan.modules.sink import ResultSink

from .chunk import scan_chunk
from .models import ProgressUpdate, ScanConfig, ScanReport, ScanResult, ScanState
from .prober import Prober

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressUpdate], None]


@dataclass(frozen=True)
class _ChunkDone:
    """Queue marker placed after the last result of a chunk."""

    chunk: Chunk


@dataclass(frozen=True)
class _ChunkFailed:
    """Queue marker for a chunk task that died with an unexpected error."""

    chunk: Chunk
    error: BaseException


class CompletionFrontier:
    """
    Tracks completed chunks and exposes the highest address below which
    every chunk has finished.

    Chunks are registered in address order; completions may arrive in any
    order. complete() returns the new frontier chunk when it moved.
    """

    def __init__(self, chunks: list[Chunk]):
        self._chunks = chunks
        self._done: set[Chunk] = set()
        self._next = 0

    def complete(self, chunk: Chunk) -> Chunk | None:
        self._done.add(chunk)
        frontier: Chunk | None = None
        while self._next < len(self._chunks) and self._chunks[self._next] in self._done:
            frontier = self._chunks[self._next]
            self._done.discard(frontier)
            self._next += 1
        return frontier


class RangeScanner:
    """
    Scans [start_ip, end_ip] x ports chunk by chunk.

    After every completed chunk the end address is persisted to the
    checkpoint store, so an interrupted scan resumes after the last whole
    chunk. In parallel mode all chunks run at once and feed one queue; each
    chunk's probe limiter is separate, so the effective concurrency is
    max_concurrent times the number of running chunks.
    """

    def __init__(
        self,
        config: ScanConfig,
        *,
        checkpoints: CheckpointStore,
        notifier: Notifier,
        prober: Prober | None = None,
        on_progress: ProgressCallback | None = None,
    ):
        self.config = config
        self.checkpoints = checkpoints
        self.notifier = notifier
        self.prober = prober if prober is not None else Prober()
        self.on_progress = on_progress
        self.state = ScanState.IDLE
        self._sink: ResultSink | None = None

    async def run_once(self) -> ScanReport:
        """Run one pass over the range, resuming from the stored checkpoint."""
        config = self.config
        report = ScanReport(start_ip=config.start_ip, end_ip=config.end_ip, ports=list(config.ports))
        try:
            start, end = self._validate()

            self.state = ScanState.LOADING_CHECKPOINT
            start = self._resume_start(start, end, report)
            total = range_size(start, end)
            if total == 0:
                logger.info("Scan complete: resumed beyond end IP %s", config.end_ip)
                self.state = ScanState.DONE
                return report
            if not config.ports:
                logger.warning("No valid ports to scan; nothing to do")
                self.state = ScanState.DONE
                return report

            report.effective_start_ip = int_to_address(start)
            logger.info("Total IPs to scan: %d", total)
            await send_quietly(
                self.notifier,
                Notification(
                    subject="Port Scan Results",
                    body=(
                        f"Starting scan from {config.start_ip} to {config.end_ip} "
                        f"on ports {format_ports(config.ports)}"
                    ),
                ),
            )

            self.state = ScanState.SCANNING
            self._open_sink()
            chunks = iter_chunks(start, end, config.chunk_size)
            if config.parallel:
                await self._scan_parallel(list(chunks), total, report)
            else:
                await self._scan_sequential(chunks, total, report)

            self.state = ScanState.FINALIZING
            self._close_sink()
            await send_quietly(
                self.notifier,
                Notification(subject="Scan complete", body=report.summary_body()),
            )
        except ScanError as exc:
            self.state = ScanState.ERROR
            self._abandon_sink()
            if isinstance(exc, PersistenceError):
                await send_quietly(
                    self.notifier,
                    Notification(subject="Scan aborted", body=str(exc)),
                )
            raise
        except BaseException:
            self.state = ScanState.ERROR
            self._abandon_sink()
            raise

        self.state = ScanState.DONE
        logger.info(
            "Scan finished: %d probes, %d open ports, %d chunks",
            report.probes,
            report.open_count,
            report.chunks_scanned,
        )
        return report

    async def run_forever(
        self,
        stop: asyncio.Event,
        interval: float = 0.0,
        max_passes: int | None = None,
    ) -> ScanReport | None:
        """
        Repeat full passes until stop is set or max_passes passes are done.

        The checkpoint is cleared after each completed pass so the next pass
        covers the whole range again. Without ports there is nothing to
        repeat, so a single pass is run.
        """
        last: ScanReport | None = None
        passes = 0
        while not stop.is_set():
            last = await self.run_once()
            passes += 1
            self.checkpoints.clear()
            logger.info("Completed pass %d over %s-%s", passes, self.config.start_ip, self.config.end_ip)
            if not self.config.ports:
                logger.warning("No ports to scan; not repeating")
                break
            if stop.is_set() or (max_passes is not None and passes >= max_passes):
                break
            try:
                await asyncio.wait_for(stop.wait(), timeout=max(interval, 0.0))
            except TimeoutError:
                pass
        return last

    def _validate(self) -> tuple[int, int]:
        config = self.config
        start = address_to_int(config.start_ip)
        end = address_to_int(config.end_ip)
        if start > end:
            raise InvalidRange(config.start_ip, config.end_ip)
        if config.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {config.chunk_size}")
        if config.max_concurrent < 1:
            raise ValueError(f"max_concurrent must be positive, got {config.max_concurrent}")
        return start, end

    def _resume_start(self, start: int, end: int, report: ScanReport) -> int:
        resume_ip = self.checkpoints.load()
        if not resume_ip:
            return start
        try:
            resume = address_to_int(resume_ip)
        except ScanError as exc:
            raise PersistenceError(f"Corrupt checkpoint value {resume_ip!r}") from exc
        if start <= resume <= end:
            logger.info("Resuming after %s", resume_ip)
            report.resumed_from = resume_ip
            return resume + 1
        return start

    async def _scan_sequential(
        self,
        chunks: Iterable[Chunk],
        total: int,
        report: ScanReport,
    ) -> None:
        config = self.config
        for chunk in chunks:
            logger.debug("Expecting %d results for chunk %s", chunk.size * len(config.ports), chunk)
            stream = scan_chunk(
                chunk.start,
                chunk.end,
                config.ports,
                config.timeout,
                config.max_concurrent,
                self.prober,
            )
            try:
                async for result in stream:
                    await self._record(result, report)
            finally:
                await stream.aclose()
            self._commit(chunk, chunk, total, report)

    async def _scan_parallel(
        self,
        chunks: list[Chunk],
        total: int,
        report: ScanReport,
    ) -> None:
        config = self.config
        queue: asyncio.Queue[ScanResult | _ChunkDone | _ChunkFailed] = asyncio.Queue(
            maxsize=max(config.max_concurrent, 1)
        )

        async def run_chunk(chunk: Chunk) -> None:
            try:
                async for result in scan_chunk(
                    chunk.start,
                    chunk.end,
                    config.ports,
                    config.timeout,
                    config.max_concurrent,
                    self.prober,
                ):
                    await queue.put(result)
            except Exception as exc:
                await queue.put(_ChunkFailed(chunk, exc))
                return
            await queue.put(_ChunkDone(chunk))

        frontier = CompletionFrontier(chunks)
        tasks = [asyncio.ensure_future(run_chunk(chunk)) for chunk in chunks]
        remaining = len(chunks)
        try:
            while remaining:
                item = await queue.get()
                if isinstance(item, ScanResult):
                    await self._record(item, report)
                    continue
                if isinstance(item, _ChunkFailed):
                    raise item.error
                remaining -= 1
                advanced = frontier.complete(item.chunk)
                self._commit(item.chunk, advanced, total, report)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _record(self, result: ScanResult, report: ScanReport) -> None:
        report.probes += 1
        if self.config.record_results:
            report.results.append(result)
        if not result.open:
            return
        report.open_results.append(result)
        line = result.line()
        logger.info("%s", line)
        if self._sink is not None:
            self._sink.write_line(line)
        await send_quietly(self.notifier, Notification(subject="Open port found", body=line))

    def _commit(
        self,
        chunk: Chunk,
        checkpoint: Chunk | None,
        total: int,
        report: ScanReport,
    ) -> None:
        """Flush output, persist the checkpoint and report progress for a finished chunk."""
        if self._sink is not None:
            self._sink.flush()
        if checkpoint is not None:
            self.checkpoints.save(checkpoint.end_ip)
        report.chunks_scanned += 1

        report.addresses_scanned += chunk.size
        update = ProgressUpdate(chunk=chunk, completed=report.addresses_scanned, total=total)
        logger.info("Progress: %.2f%% complete", update.percent)
        if self.on_progress is not None:
            self.on_progress(update)

    def _open_sink(self) -> None:
        if self.config.output_path is None:
            return
        self._sink = ResultSink(self.config.output_path, compress=self.config.compress).open()

    def _close_sink(self) -> None:
        sink, self._sink = self._sink, None
        if sink is not None:
            sink.close()

    def _abandon_sink(self) -> None:
        try:
            self._close_sink()
        except PersistenceError:
            logger.warning("Failed to close output file after error", exc_info=True)
