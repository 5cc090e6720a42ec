"""Append-only result file, optionally gzip-compressed."""

import gzip
import logging
from pathlib import Path
from typing import IO

from rangescan.errors import PersistenceError

logger = logging.getLogger(__name__)


class ResultSink:
    """Line-oriented writer for open-port results."""

    def __init__(self, path: Path | str, compress: bool = False):
        self.path = Path(path)
        self.compress = compress
        self._handle: IO[str] | None = None
        self.lines_written = 0

    def open(self) -> "ResultSink":
        try:
            if self.compress:
                self._handle = gzip.open(self.path, "at", encoding="utf-8")
            else:
                self._handle = open(self.path, "a", encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Failed to open output file {self.path}: {exc}") from exc
        logger.debug("Opened result sink %s (compress=%s)", self.path, self.compress)
        return self

    def write_line(self, line: str) -> None:
        if self._handle is None:
            raise PersistenceError(f"Output file {self.path} is not open")
        try:
            self._handle.write(line + "\n")
        except OSError as exc:
            raise PersistenceError(f"Failed to write to output file {self.path}: {exc}") from exc
        self.lines_written += 1

    def flush(self) -> None:
        if self._handle is None:
            return
        try:
            self._handle.flush()
        except OSError as exc:
            raise PersistenceError(f"Failed to flush output file {self.path}: {exc}") from exc

    def close(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        try:
            handle.close()
        except OSError as exc:
            raise PersistenceError(f"Failed to close output file {self.path}: {exc}") from exc

    def __enter__(self) -> "ResultSink":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
