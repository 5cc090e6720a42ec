"""Data models for range scanning."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from rangescan.modules.addressing import Chunk


@dataclass(frozen=True)
class ProbeFailure:
    """Why a single connect attempt did not succeed."""

    kind: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ProbeFailure":
        message = str(exc) or exc.__class__.__name__
        return cls(kind=exc.__class__.__name__, message=message)

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


@dataclass(frozen=True)
class ScanResult:
    """Outcome of probing one (ip, port) pair."""

    ip: str
    port: int
    open: bool
    error: ProbeFailure | None = None

    def line(self) -> str:
        """Result sink line for an open port."""
        return f"Port {self.port} is open on {self.ip}"


class ScanState(str, Enum):
    """Lifecycle states of a RangeScanner."""

    IDLE = "idle"
    LOADING_CHECKPOINT = "loading_checkpoint"
    SCANNING = "scanning"
    FINALIZING = "finalizing"
    DONE = "done"
    ERROR = "error"


@dataclass
class ScanConfig:
    """Parameters of one range scan."""

    start_ip: str
    end_ip: str
    ports: list[int]
    timeout: float = 2.0
    max_concurrent: int = 1000
    chunk_size: int = 1_000_000
    parallel: bool = False
    output_path: Path | None = None
    compress: bool = False
    record_results: bool = True


@dataclass(frozen=True)
class ProgressUpdate:
    """Emitted after each chunk has been drained and checkpointed."""

    chunk: Chunk
    completed: int
    total: int

    @property
    def percent(self) -> float:
        if self.total <= 0:
            return 100.0
        return min(100.0, self.completed / self.total * 100)


@dataclass
class ScanReport:
    """Aggregate outcome of one pass over the range."""

    start_ip: str
    end_ip: str
    ports: list[int]
    effective_start_ip: str | None = None
    resumed_from: str | None = None
    chunks_scanned: int = 0
    addresses_scanned: int = 0
    probes: int = 0
    results: list[ScanResult] = field(default_factory=list)
    open_results: list[ScanResult] = field(default_factory=list)

    @property
    def open_count(self) -> int:
        return len(self.open_results)

    @property
    def complete_without_work(self) -> bool:
        """True when the pass had nothing left to scan."""
        return self.chunks_scanned == 0

    def summary_body(self) -> str:
        if not self.open_results:
            return "No open ports found"
        return "\n".join(result.line() for result in self.open_results)
