"""Shared fixtures for core unit tests."""

import pytest

from taskvault.config import EngineConfig
from taskvault.core.storage import CollectionCache, CollectionStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def store(config, clock):
    """Store with a cache driven by the fake clock."""
    cache = CollectionCache(
        ttl_seconds=config.cache_ttl_seconds,
        capacity=config.cache_capacity,
        clock=clock,
    )
    return CollectionStore(config, cache=cache)
