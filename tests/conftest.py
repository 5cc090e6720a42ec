"""Test configuration and fixtures for rangescan."""

import asyncio
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from rangescan.modules.checkpoint import MemoryCheckpointStore
from rangescan.modules.notify import Notification

CONFIG_KEYS = (
    "BREVO_URL",
    "BREVO_APIKEY",
    "SENDER_EMAIL",
    "TO_EMAIL",
    "SENDER_NAME",
    "TO_NAME",
    "PORT",
    "RANGESCAN_CHECKPOINT_BACKEND",
    "RANGESCAN_UPDATE_INTERVAL",
    "RANGESCAN_VERBOSE",
)


class FakeDialer:
    """Dialer that succeeds for selected targets and records concurrency."""

    def __init__(
        self,
        open_targets: set[tuple[str, int]] | None = None,
        *,
        open_all: bool = False,
        delay: float = 0.0,
        error: BaseException | None = None,
    ):
        self.open_targets = open_targets or set()
        self.open_all = open_all
        self.delay = delay
        self.error = error
        self.calls: list[tuple[str, int, float]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def connect(self, ip: str, port: int, timeout: float) -> None:
        self.calls.append((ip, port, timeout))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if self.open_all or (ip, port) in self.open_targets:
                return
            if self.error is not None:
                raise self.error
            raise ConnectionRefusedError(f"connection refused by {ip}:{port}")
        finally:
            self.in_flight -= 1


class RecordingNotifier:
    """Notifier that records every notification it is asked to send."""

    def __init__(self, status: int = 200, error: BaseException | None = None):
        self.status = status
        self.error = error
        self.sent: list[Notification] = []

    async def send(self, notification: Notification) -> int:
        self.sent.append(notification)
        if self.error is not None:
            raise self.error
        return self.status

    def subjects(self) -> list[str]:
        return [n.subject for n in self.sent]


class RecordingCheckpointStore(MemoryCheckpointStore):
    """Memory store that also records every saved checkpoint in order."""

    def __init__(self, initial: str | None = None):
        super().__init__(initial)
        self.saved: list[str] = []

    def save(self, address: str) -> None:
        self.saved.append(address)
        super().save(address)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path: Path) -> Path:
    """Keep tests away from the real environment, ~/.rangescan and ./.env."""
    for key in CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def open_dialer() -> FakeDialer:
    """Dialer for which every connect succeeds."""
    return FakeDialer(open_all=True)


@pytest.fixture
def closed_dialer() -> FakeDialer:
    """Dialer for which every connect is refused."""
    return FakeDialer()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def memory_store() -> RecordingCheckpointStore:
    return RecordingCheckpointStore()


@pytest.fixture
def make_dialer():
    """Factory for FakeDialer instances."""
    return FakeDialer


@pytest.fixture
def make_notifier():
    """Factory for RecordingNotifier instances."""
    return RecordingNotifier
