"""
Client-puzzle proof of work.

Given a payload and a cost, search() finds a random nonce such that the BLAKE3
hash of ``nonce || payload`` has at least cost leading zero bits; verify()
checks one with a single hash.
"""

from .constants import NONCE_SIZE, DIGEST_SIZE, DIGEST_BITS
from .exceptions import (
    PowError,
    SearchError,
    RandomSourceError,
    BudgetExhaustedError,
    InvalidNonceError,
)
from .hashing import digest
from .proof import search, search_with_attempts, verify
from .random_source import RandomSource, SystemRandomSource, SeededRandomSource
from .zeros import leading_zeros

__all__ = [
    "NONCE_SIZE",
    "DIGEST_SIZE",
    "DIGEST_BITS",
    "PowError",
    "SearchError",
    "RandomSourceError",
    "BudgetExhaustedError",
    "InvalidNonceError",
    "digest",
    "search",
    "search_with_attempts",
    "verify",
    "RandomSource",
    "SystemRandomSource",
    "SeededRandomSource",
    "leading_zeros",
]
