"""Leading zero counter: tests for the difficulty metric.

Tests cover:
    - empty input counts zero
    - all-zero input of length N counts 8N
    - first non-zero byte stops the scan
    - every single byte value matches its bit length
"""

import pytest

from pow_core.zeros import leading_zeros, byte_leading_zeros


# ─── fixed values ────────────────────────────────────────────────

def test_empty_input_has_no_leading_zeros():
    assert leading_zeros(b"") == 0


@pytest.mark.parametrize("data, expected", [
    (b"\x0f", 4),
    (b"\x01", 7),
    (b"\x02", 6),
    (b"\x06", 5),
    (b"\x1f", 3),
    (b"\x80", 0),
    (b"\xff", 0),
    (b"\x00", 8),
    (b"\x00\x01", 15),
    (b"\x00\x00", 16),
    (b"\x00\x80\x00", 8),
])
def test_known_values(data, expected):
    assert leading_zeros(data) == expected


@pytest.mark.parametrize("n", [1, 2, 7, 32, 100])
def test_all_zero_bytes_count_eight_each(n):
    assert leading_zeros(bytes(n)) == 8 * n


# ─── scan stops at first set bit ─────────────────────────────────

def test_bytes_after_first_nonzero_are_ignored():
    assert leading_zeros(b"\x01\x00\x00\x00") == 7
    assert leading_zeros(b"\x01\xff") == 7


def test_zero_byte_adds_eight_to_what_follows():
    for tail in (b"\x01", b"\x40", b"\xff"):
        assert leading_zeros(b"\x00" + tail) == 8 + leading_zeros(tail)


def test_every_single_byte_value():
    for value in range(1, 256):
        expected = 7 - (value.bit_length() - 1)
        assert leading_zeros(bytes([value])) == expected
        assert byte_leading_zeros(value) == expected
    assert byte_leading_zeros(0) == 8


def test_accepts_bytearray_and_memoryview():
    assert leading_zeros(bytearray(b"\x00\x03")) == 14
    assert leading_zeros(memoryview(b"\x00\x00\x10")) == 19
