"""
Unit tests for the expiring response cache.
"""

import pytest

from service_aggregator.app.caching.expiring_cache import CacheEntry, ExpiringCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class TestExpiringCache:
    """Test cases for ExpiringCache."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return ExpiringCache("test", default_ttl=60, clock=clock)

    def test_get_missing_key(self, cache):
        assert cache.get("missing") is None
        assert cache.get_stats()["misses"] == 1

    def test_set_and_get_within_ttl(self, cache, clock):
        cache.set("events:coldplay", [{"id": "1"}], ttl=10)
        clock.advance(9.9)
        assert cache.get("events:coldplay") == [{"id": "1"}]
        assert cache.get_stats()["hits"] == 1

    def test_entry_expires_at_ttl_boundary(self, cache, clock):
        cache.set("song:42", {"id": 42}, ttl=10)
        clock.advance(10)
        assert cache.get("song:42") is None
        assert len(cache) == 0

    def test_default_ttl_is_used(self, cache, clock):
        cache.set("key", "value")
        clock.advance(59)
        assert cache.has("key")
        clock.advance(1)
        assert not cache.has("key")

    def test_set_replaces_value_and_expiry(self, cache, clock):
        cache.set("key", "old", ttl=5)
        clock.advance(4)
        cache.set("key", "new", ttl=5)
        clock.advance(4)
        assert cache.get("key") == "new"

    def test_delete(self, cache):
        cache.set("key", "value")
        assert cache.delete("key") is True
        assert cache.delete("key") is False
        assert cache.get("key") is None

    def test_sweep_drops_only_expired(self, cache, clock):
        cache.set("short", 1, ttl=5)
        cache.set("long", 2, ttl=100)
        clock.advance(10)

        assert cache.sweep() == 1
        assert len(cache) == 1
        assert cache.get("long") == 2

    def test_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert len(cache) == 0

    def test_cache_entry_liveness(self):
        entry = CacheEntry(value="x", expires_at=50.0)
        assert entry.is_live(49.9)
        assert not entry.is_live(50.0)
