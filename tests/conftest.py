"""Shared fixtures for the proof-of-work test suite."""

import logging

import pytest

from pow_core.config import config
from pow_core.random_source import SeededRandomSource


class FailingRandomSource:
    """Random source whose entropy pool is always unavailable."""

    def random_bytes(self, n):
        raise OSError("entropy source unavailable")


class ShortRandomSource:
    """Random source that hands out too few bytes."""

    def random_bytes(self, n):
        return b"\x00" * (n - 1)


class FixedRandomSource:
    """Returns the same bytes on every call and counts the calls."""

    def __init__(self, value):
        self.value = value
        self.calls = 0

    def random_bytes(self, n):
        self.calls += 1
        return self.value[:n]


@pytest.fixture(autouse=True)
def reset_config():
    config.reset()
    yield
    config.reset()


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def seeded_rng():
    return SeededRandomSource(1234)
