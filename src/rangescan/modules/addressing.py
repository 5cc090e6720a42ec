"""IPv4 address space helpers: integer conversion and chunking."""

import ipaddress
from collections.abc import Iterator
from dataclasses import dataclass

from rangescan.errors import InvalidAddress

MAX_ADDRESS = 0xFFFFFFFF


def address_to_int(dotted_quad: str) -> int:
    """Convert a dotted-quad IPv4 string to its 32-bit integer value."""
    if not isinstance(dotted_quad, str):
        raise InvalidAddress(str(dotted_quad))
    try:
        return int(ipaddress.IPv4Address(dotted_quad.strip()))
    except ValueError:
        raise InvalidAddress(dotted_quad) from None


def int_to_address(value: int) -> str:
    """Convert a 32-bit integer to dotted-quad form (masked to 32 bits)."""
    return str(ipaddress.IPv4Address(value & MAX_ADDRESS))


def range_size(start: int, end: int) -> int:
    """Number of addresses in the inclusive range, 0 when start > end."""
    return max(0, end - start + 1)


@dataclass(frozen=True)
class Chunk:
    """Inclusive sub-interval of the address space scanned as one unit."""

    start: int
    end: int

    @property
    def size(self) -> int:
        return range_size(self.start, self.end)

    @property
    def start_ip(self) -> str:
        return int_to_address(self.start)

    @property
    def end_ip(self) -> str:
        return int_to_address(self.end)

    def addresses(self) -> Iterator[str]:
        """Yield every address of the chunk in ascending order."""
        for value in range(self.start, self.end + 1):
            yield int_to_address(value)

    def __str__(self) -> str:
        return f"{self.start_ip}-{self.end_ip}"


def iter_chunks(start: int, end: int, chunk_size: int) -> Iterator[Chunk]:
    """
    Split [start, end] into consecutive chunks of at most chunk_size addresses.

    The last chunk is truncated to end. Chunk ends never exceed end, so a
    range ending at 255.255.255.255 does not wrap around.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    chunk_start = start
    while chunk_start <= end:
        chunk_end = min(chunk_start + chunk_size - 1, end)
        yield Chunk(chunk_start, chunk_end)
        chunk_start = chunk_end + 1
