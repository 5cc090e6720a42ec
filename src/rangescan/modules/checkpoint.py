"""Last-completed-address checkpoint storage."""

import logging
import os
from pathlib import Path
from typing import Protocol

from rangescan.errors import InvalidAddress, PersistenceError
from rangescan.modules.addressing import address_to_int

logger = logging.getLogger(__name__)

CHECKPOINT_BACKENDS = ("file", "memory")


class CheckpointStore(Protocol):
    """Single-value store of the last fully scanned address."""

    def load(self) -> str | None: ...

    def save(self, address: str) -> None: ...

    def clear(self) -> None: ...


class MemoryCheckpointStore:
    """In-memory checkpoint store holding a single value."""

    def __init__(self, initial: str | None = None):
        self.value = initial or None

    def load(self) -> str | None:
        return self.value

    def save(self, address: str) -> None:
        self.value = address

    def clear(self) -> None:
        self.value = None


class FileCheckpointStore:
    """Checkpoint persisted as a single line in a text file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> str | None:
        """Return the stored address, or None if no checkpoint exists yet."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Failed to load checkpoint {self.path}: {exc}") from exc

        lines = text.splitlines()
        value = lines[0].strip() if lines else ""
        if not value:
            return None
        try:
            address_to_int(value)
        except InvalidAddress as exc:
            raise PersistenceError(f"Corrupt checkpoint {self.path}: {value!r}") from exc
        return value

    def save(self, address: str) -> None:
        """Overwrite the checkpoint; the file is replaced atomically."""
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(address + "\n", encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not remove temporary checkpoint %s", tmp_path)
            raise PersistenceError(f"Failed to save checkpoint {self.path}: {exc}") from exc

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Failed to clear checkpoint {self.path}: {exc}") from exc


def create_checkpoint_store(backend: str, path: Path | str | None = None) -> CheckpointStore:
    """Build the checkpoint store selected by configuration."""
    name = backend.strip().lower() if isinstance(backend, str) else ""
    if name == "memory":
        return MemoryCheckpointStore()
    if name == "file":
        if path is None:
            raise ValueError("File checkpoint backend requires a path")
        return FileCheckpointStore(path)
    raise ValueError(
        f"Unknown checkpoint backend {backend!r}; expected one of {', '.join(CHECKPOINT_BACKENDS)}"
    )
