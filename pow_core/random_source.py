"""
Random Source Module

Injectable random-byte capability used by the nonce search. The system source
is the default; the seeded source exists so tests can replay a search.
"""

import os
import random
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    """Anything that can hand out n random bytes."""

    def random_bytes(self, n: int) -> bytes:
        ...


class SystemRandomSource:
    """
    OS CSPRNG backed source.

    Holds no state, so a single instance may be shared by concurrent searches.
    Any OSError from the operating system propagates to the caller.
    """

    def random_bytes(self, n: int) -> bytes:
        return os.urandom(n)

    def __repr__(self) -> str:
        return "SystemRandomSource()"


class SeededRandomSource:
    """
    Deterministic source for reproducible tests.

    Not cryptographically adequate. Each instance owns its generator; don't
    share one between threads.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def random_bytes(self, n: int) -> bytes:
        return self._rng.randbytes(n)

    def __repr__(self) -> str:
        return f"SeededRandomSource(seed={self.seed!r})"


default_source = SystemRandomSource()
