"""
Tests for Lookup Cache — capacity eviction, TTL expiry, stats.
"""

import pytest

from threatscope.cache.lookup_cache import LookupCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_put_and_get():
    cache = LookupCache()
    cache.put("a", 1)
    assert cache.get("a") == 1
    assert cache.get("missing", "default") == "default"


def test_none_is_a_cacheable_value():
    cache = LookupCache()
    cache.put("identity:0xabc", None)
    assert cache.contains("identity:0xabc")
    assert cache.get("identity:0xabc", "sentinel") is None


def test_evicts_oldest_beyond_capacity():
    cache = LookupCache(capacity=2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("c", 3)

    assert cache.size == 2
    assert not cache.contains("a")
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_reinsert_refreshes_position():
    cache = LookupCache(capacity=2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("a", 10)
    cache.put("c", 3)

    assert cache.get("a") == 10
    assert not cache.contains("b")


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = LookupCache(ttl_seconds=60, clock=clock)
    cache.put("a", 1)

    clock.now += 59
    assert cache.get("a") == 1

    clock.now += 2
    assert cache.get("a") is None
    assert cache.size == 0


def test_stats_and_counters():
    clock = FakeClock()
    cache = LookupCache(capacity=10, ttl_seconds=5, clock=clock)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.get("a")
    cache.get("zzz")
    clock.now += 10

    stats = cache.stats()
    assert stats["total_entries"] == 2
    assert stats["expired_entries"] == 2
    assert stats["active_entries"] == 0
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["capacity"] == 10


def test_invalidate_and_clear():
    cache = LookupCache()
    cache.put("a", 1)
    cache.put("b", 2)
    assert cache.invalidate("a") is True
    assert cache.invalidate("a") is False
    cache.clear()
    assert cache.size == 0


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        LookupCache(capacity=0)
