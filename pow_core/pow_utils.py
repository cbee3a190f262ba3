"""
Proof-of-Work Utilities Module

Small helpers shared by the search engine, the worker pool and the CLI.
"""

import binascii

from .constants import (
    NONCE_SIZE,
    PAYLOAD_DISPLAY_LENGTH,
    HASHRATE_EMA_WEIGHT_OLD,
    HASHRATE_MH_THRESHOLD
)
from .exceptions import InvalidNonceError


def format_nonce_hex(nonce: bytes) -> str:
    """
    Format nonce as a lowercase hex string.

    Example:
        >>> format_nonce_hex(bytes(range(10)))
        '00010203040506070809'
    """
    return bytes(nonce).hex()


def parse_nonce_hex(text: str) -> bytes:
    """
    Parse a hex nonce back into bytes.

    Args:
        text: Hex string, optional '0x' prefix, surrounding whitespace ignored

    Returns:
        NONCE_SIZE nonce bytes

    Raises:
        InvalidNonceError: If text is not hex or has the wrong length

    Example:
        >>> parse_nonce_hex("0x00010203040506070809")
        b'\\x00\\x01\\x02\\x03\\x04\\x05\\x06\\x07\\x08\\t'
    """
    clean = text.strip().lower()
    if clean.startswith('0x'):
        clean = clean[2:]

    try:
        nonce = bytes.fromhex(clean)
    except (ValueError, binascii.Error):
        raise InvalidNonceError(text, "Nonce is not valid hex")

    if len(nonce) != NONCE_SIZE:
        raise InvalidNonceError(text, f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
    return nonce


def expected_attempts(cost: int) -> int:
    """
    Expected number of attempts to meet a cost.

    Example:
        >>> expected_attempts(20)
        1048576
    """
    return 2 ** cost


def truncate_payload(payload: bytes, length: int = PAYLOAD_DISPLAY_LENGTH) -> str:
    """
    Render a payload for log lines, cut to length bytes.

    Example:
        >>> truncate_payload(b"124124125124214121", 8)
        "b'12412412'..."
    """
    if len(payload) <= length:
        return repr(bytes(payload))
    return repr(bytes(payload[:length])) + "..."


def calculate_hashrate(attempts: int, duration: float) -> float:
    """
    Calculate hashrate from number of attempts and duration.

    Returns:
        Attempts per second (0 if duration is 0)

    Example:
        >>> calculate_hashrate(1000000, 10.0)
        100000.0
    """
    if duration <= 0:
        return 0.0
    return attempts / duration


def smooth_hashrate(old_hashrate: float, new_hashrate: float, weight_old: float = HASHRATE_EMA_WEIGHT_OLD) -> float:
    """
    Apply exponential moving average to smooth hashrate fluctuations.

    Example:
        >>> smooth_hashrate(1000.0, 1200.0, 0.9)
        1020.0
    """
    if old_hashrate == 0:
        return new_hashrate

    weight_new = 1.0 - weight_old
    return (weight_old * old_hashrate) + (weight_new * new_hashrate)


def format_hashrate(hashrate: float) -> str:
    """Human readable hashrate, switching to MH/s above the threshold."""
    if hashrate >= HASHRATE_MH_THRESHOLD:
        return f"{hashrate / 1_000_000:.2f} MH/s"
    return f"{hashrate / 1000:.2f} KH/s"
