"""Tests for the TTL cache."""

from __future__ import annotations

import pytest

from .cache import TTLCache


class FakeClock:
    """Manually advanced clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def test_get_returns_stored_value(clock: FakeClock) -> None:
    cache: TTLCache[str] = TTLCache(max_size=4, ttl_seconds=60, clock=clock)
    cache.set("a", "alpha")
    assert cache.get("a") == "alpha"
    assert "a" in cache


def test_entry_expires_after_ttl(clock: FakeClock) -> None:
    cache: TTLCache[str] = TTLCache(max_size=4, ttl_seconds=60, clock=clock)
    cache.set("a", "alpha")

    clock.advance(59)
    assert cache.get("a") == "alpha"

    clock.advance(1)
    assert cache.get("a") is None
    assert len(cache) == 0


def test_overflow_evicts_oldest_entry(clock: FakeClock) -> None:
    cache: TTLCache[int] = TTLCache(max_size=2, ttl_seconds=60, clock=clock)
    cache.set("first", 1)
    clock.advance(1)
    cache.set("second", 2)
    clock.advance(1)
    cache.set("third", 3)

    assert cache.get("first") is None
    assert cache.get("second") == 2
    assert cache.get("third") == 3
    assert len(cache) == 2


def test_replacing_existing_key_does_not_evict(clock: FakeClock) -> None:
    cache: TTLCache[int] = TTLCache(max_size=2, ttl_seconds=60, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)

    assert cache.get("a") == 10
    assert cache.get("b") == 2


def test_invalidate_and_clear(clock: FakeClock) -> None:
    cache: TTLCache[int] = TTLCache(max_size=4, ttl_seconds=60, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)

    assert cache.invalidate("a") is True
    assert cache.invalidate("a") is False
    cache.clear()
    assert len(cache) == 0


def test_stats_counts_hits(clock: FakeClock) -> None:
    cache: TTLCache[int] = TTLCache(max_size=4, ttl_seconds=60, clock=clock)
    cache.set("a", 1)
    cache.get("a")
    cache.get("a")

    stats = cache.stats()
    assert stats["size"] == 1
    assert stats["total_hits"] == 2


def test_rejects_zero_size() -> None:
    with pytest.raises(ValueError):
        TTLCache(max_size=0)
