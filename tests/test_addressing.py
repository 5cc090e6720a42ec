"""Tests for IPv4 address conversion and chunking."""

import pytest

from rangescan.errors import InvalidAddress
from rangescan.modules.addressing import (
    MAX_ADDRESS,
    Chunk,
    address_to_int,
    int_to_address,
    iter_chunks,
    range_size,
)


class TestAddressConversion:
    """Test dotted-quad <-> integer conversion."""

    def test_known_values(self):
        assert address_to_int("192.168.1.1") == 3232235777
        assert address_to_int("255.255.255.255") == 4294967295
        assert address_to_int("0.0.0.0") == 0

    @pytest.mark.parametrize(
        "address",
        ["0.0.0.0", "10.0.0.1", "172.16.254.3", "192.168.1.1", "255.255.255.255"],
    )
    def test_round_trip(self, address):
        assert int_to_address(address_to_int(address)) == address

    def test_int_to_address(self):
        assert int_to_address(3232235777) == "192.168.1.1"
        assert int_to_address(MAX_ADDRESS) == "255.255.255.255"

    def test_int_to_address_masks_to_32_bits(self):
        assert int_to_address(MAX_ADDRESS + 1) == "0.0.0.0"

    def test_surrounding_whitespace_is_accepted(self):
        assert address_to_int(" 10.0.0.1 ") == address_to_int("10.0.0.1")

    @pytest.mark.parametrize(
        "bad",
        ["", "192.168.1", "256.1.1.1", "a.b.c.d", "192.168.1.1.1", "::1", "10.0.0.-1"],
    )
    def test_invalid_addresses_raise(self, bad):
        with pytest.raises(InvalidAddress):
            address_to_int(bad)

    def test_invalid_address_is_value_error(self):
        with pytest.raises(ValueError, match="Invalid IPv4 address"):
            address_to_int("not-an-ip")


class TestChunking:
    """Test deterministic partitioning of ranges."""

    def test_even_split(self):
        chunks = list(iter_chunks(0, 9, 5))
        assert chunks == [Chunk(0, 4), Chunk(5, 9)]

    def test_last_chunk_truncated(self):
        chunks = list(iter_chunks(10, 16, 3))
        assert chunks == [Chunk(10, 12), Chunk(13, 15), Chunk(16, 16)]

    def test_chunks_cover_range_without_gaps(self):
        start, end = address_to_int("10.0.0.250"), address_to_int("10.0.3.7")
        chunks = list(iter_chunks(start, end, 97))
        assert chunks[0].start == start
        assert chunks[-1].end == end
        for previous, current in zip(chunks, chunks[1:]):
            assert current.start == previous.end + 1
        assert sum(chunk.size for chunk in chunks) == range_size(start, end)

    def test_single_address(self):
        assert list(iter_chunks(5, 5, 1000)) == [Chunk(5, 5)]

    def test_empty_when_start_after_end(self):
        assert list(iter_chunks(6, 5, 10)) == []

    def test_clamps_at_top_of_address_space(self):
        start = MAX_ADDRESS - 2
        chunks = list(iter_chunks(start, MAX_ADDRESS, 1_000_000))
        assert chunks == [Chunk(start, MAX_ADDRESS)]
        assert chunks[0].end_ip == "255.255.255.255"

    def test_clamps_at_top_with_partial_chunks(self):
        chunks = list(iter_chunks(MAX_ADDRESS - 4, MAX_ADDRESS, 2))
        assert [chunk.size for chunk in chunks] == [2, 2, 1]
        assert all(chunk.end <= MAX_ADDRESS for chunk in chunks)

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            list(iter_chunks(0, 10, 0))

    def test_chunk_addresses(self):
        chunk = Chunk(address_to_int("192.168.1.254"), address_to_int("192.168.2.1"))
        assert list(chunk.addresses()) == [
            "192.168.1.254",
            "192.168.1.255",
            "192.168.2.0",
            "192.168.2.1",
        ]
        assert str(chunk) == "192.168.1.254-192.168.2.1"

    def test_range_size(self):
        assert range_size(1, 1) == 1
        assert range_size(1, 10) == 10
        assert range_size(5, 4) == 0
