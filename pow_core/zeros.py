"""
Leading Zero Counter

Counts the leading zero bits of a byte string, the difficulty metric shared by
search and verification.
"""


def byte_leading_zeros(byte: int) -> int:
    """Leading zero bits of a single byte value (8 for zero)."""
    return 8 - byte.bit_length()


def leading_zeros(data: bytes) -> int:
    """
    Count consecutive zero bits from the most significant bit of data[0].

    Whole zero bytes contribute 8 each; the first non-zero byte contributes its
    own leading zeros and ends the scan.

    Args:
        data: Any bytes-like sequence, empty included

    Returns:
        Number of leading zero bits

    Example:
        >>> leading_zeros(b"\\x00\\x01")
        15
        >>> leading_zeros(b"")
        0
    """
    count = 0
    for byte in bytes(data):
        lz = byte_leading_zeros(byte)
        count += lz
        if lz < 8:
            break
    return count
