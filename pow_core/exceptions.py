"""
Custom Exception Classes

Defines the exceptions raised by the proof-of-work library so callers can tell
a failed random source apart from an exhausted attempt budget.
"""

from typing import Optional


class PowError(Exception):
    """Base exception class for all proof-of-work errors."""
    pass


class SearchError(PowError):
    """Base class for errors that end a nonce search."""
    pass


class RandomSourceError(SearchError):
    """Raised when the random source cannot supply nonce bytes."""

    def __init__(self, message: str = "Random source failed"):
        super().__init__(message)


class BudgetExhaustedError(SearchError):
    """Raised when a search runs past its attempt budget without a proof."""

    def __init__(self, cost: int, meter: int, attempts: Optional[int] = None):
        self.cost = cost
        self.meter = meter
        self.attempts = attempts if attempts is not None else meter + 1
        super().__init__(
            f"No nonce with {cost} leading zero bits after {self.attempts} attempts (meter={meter})"
        )


class InvalidNonceError(PowError):
    """Raised when a nonce cannot be decoded from its text form."""

    def __init__(self, value: str, message: str = "Invalid nonce"):
        self.value = value
        super().__init__(f"{message}: {value!r}")


class ConfigurationError(PowError):
    """Raised for configuration-related errors."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Configuration error for '{key}': {message}")


class WorkerError(PowError):
    """Base class for worker-related errors."""
    pass


class WorkerCrashError(WorkerError):
    """Raised when a search worker process dies or reports an internal failure."""

    def __init__(self, worker_id: int, message: str = "Worker crashed"):
        self.worker_id = worker_id
        super().__init__(f"Worker {worker_id}: {message}")


class WorkerTimeoutError(WorkerError):
    """Raised when pooled searches don't finish in time."""

    def __init__(self, pending: int, timeout: float):
        self.pending = pending
        self.timeout = timeout
        super().__init__(f"{pending} search(es) still running after {timeout}s")
