"""Scan-level error types."""


class ScanError(Exception):
    """Base class for errors that abort a range scan."""


class InvalidAddress(ScanError, ValueError):
    """Raised when a string is not a well-formed IPv4 literal."""

    def __init__(self, value: str):
        super().__init__(f"Invalid IPv4 address: {value!r}")
        self.value = value


class InvalidRange(ScanError, ValueError):
    """Raised when the start address lies after the end address."""

    def __init__(self, start_ip: str, end_ip: str):
        super().__init__(f"Invalid IP range: start {start_ip} is greater than end {end_ip}")
        self.start_ip = start_ip
        self.end_ip = end_ip


class PersistenceError(ScanError):
    """Checkpoint or result sink could not be read or written."""


class NotificationFailure(ScanError):
    """A notification could not be delivered. Never fatal to a scan."""
