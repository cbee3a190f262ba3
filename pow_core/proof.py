"""
Proof Module

Nonce search and verification. The search is a pure generate-and-test loop:
every attempt draws a fresh random nonce, hashes ``nonce || payload`` and
checks the digest's leading zero bits against the cost. Expected work is about
2**cost attempts; the meter caps the worst case.

Verification repeats the check once, so it costs a single hash.
"""

import logging
import time
from typing import Optional, Tuple

from .constants import NONCE_SIZE, DIGEST_BITS
from .exceptions import RandomSourceError, BudgetExhaustedError
from .hashing import digest
from .random_source import RandomSource, default_source
from .zeros import leading_zeros
from . import pow_utils


def _draw_nonce(rng: RandomSource) -> bytes:
    try:
        nonce = rng.random_bytes(NONCE_SIZE)
    except Exception as e:
        raise RandomSourceError(f"Random source {rng!r} failed: {e}") from e

    if len(nonce) != NONCE_SIZE:
        raise RandomSourceError(
            f"Random source {rng!r} returned {len(nonce)} bytes, expected {NONCE_SIZE}"
        )
    return bytes(nonce)


def search_with_attempts(
    payload: bytes,
    cost: int,
    meter: int,
    rng: Optional[RandomSource] = None
) -> Tuple[bytes, int]:
    """
    Search for a nonce and report how many attempts it took.

    Args:
        payload: Bytes the proof is bound to
        cost: Required leading zero bits
        meter: Attempts allowed beyond the first (meter=0 means one attempt)
        rng: Random source (defaults to the OS CSPRNG)

    Returns:
        Tuple of (nonce, attempts)

    Raises:
        RandomSourceError: If the random source fails
        BudgetExhaustedError: If more than meter attempts fail
        ValueError: If cost or meter is negative
    """
    if cost < 0:
        raise ValueError(f"cost must be non-negative, got {cost}")
    if meter < 0:
        raise ValueError(f"meter must be non-negative, got {meter}")

    if rng is None:
        rng = default_source
    payload = bytes(payload)

    if cost > DIGEST_BITS:
        logging.debug(f"Cost {cost} exceeds digest size ({DIGEST_BITS} bits), search cannot succeed")

    logging.debug(
        f"Searching: payload={pow_utils.truncate_payload(payload)} cost={cost} meter={meter}"
    )
    start_time = time.time()
    counter = 0

    while True:
        nonce = _draw_nonce(rng)
        if leading_zeros(digest(nonce, payload)) >= cost:
            attempts = counter + 1
            logging.debug(
                f"Found nonce {pow_utils.format_nonce_hex(nonce)} after {attempts} attempts "
                f"({time.time() - start_time:.3f}s)"
            )
            return nonce, attempts

        counter += 1
        if counter > meter:
            logging.debug(f"Meter overdrawn after {counter} attempts (cost={cost})")
            raise BudgetExhaustedError(cost, meter, counter)


def search(
    payload: bytes,
    cost: int,
    meter: int,
    rng: Optional[RandomSource] = None
) -> bytes:
    """
    Find a NONCE_SIZE-byte nonce whose hash with payload has cost leading zeros.

    Blocks the calling thread until it succeeds or the meter runs out. Never
    returns a nonce that fails verify().

    Example:
        >>> nonce = search(b"hello", cost=8, meter=100_000)
        >>> verify(b"hello", nonce, 8)
        True
    """
    nonce, _ = search_with_attempts(payload, cost, meter, rng)
    return nonce


def verify(payload: bytes, nonce: bytes, cost: int) -> bool:
    """Check whether nonce is a proof of work of at least cost for payload."""
    if len(nonce) != NONCE_SIZE:
        return False
    return leading_zeros(digest(bytes(nonce), bytes(payload))) >= cost
