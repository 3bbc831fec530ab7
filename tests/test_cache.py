"""Tests for the TTL caches and the background sweep."""

import asyncio

import pytest

from budgetup.models.currency import CurrencyCode
from budgetup.services.currency import CurrencyCache, TTLCache
from budgetup.services.currency.cache import conversion_key, format_key


class TestTTLCache:
    """Tests for a single TTL cache."""

    def test_get_missing_is_none(self, clock):
        cache = TTLCache("t", clock=clock)
        assert cache.get("nope") is None
        assert cache.misses == 1

    def test_set_and_get(self, clock):
        cache = TTLCache("t", clock=clock)
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert cache.hits == 1

    def test_entry_valid_at_exact_ttl(self, clock):
        """Test that an entry is still valid when age equals ttl."""
        cache = TTLCache("t", default_ttl=300, clock=clock)
        cache.set("a", 1)
        clock.advance(300)
        assert cache.get("a") == 1

    def test_expiry_without_sweep(self, clock):
        """Test that an expired entry reads as absent and is deleted on access."""
        cache = TTLCache("t", default_ttl=300, clock=clock)
        cache.set("a", 1)
        clock.advance(301)
        assert "a" not in cache
        assert len(cache) == 1
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_per_entry_ttl(self, clock):
        cache = TTLCache("t", default_ttl=300, clock=clock)
        cache.set("short", 1, ttl=10)
        cache.set("long", 2)
        clock.advance(11)
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_reset_refreshes_entry(self, clock):
        """Test that setting an existing key restarts its lifetime."""
        cache = TTLCache("t", default_ttl=100, clock=clock)
        cache.set("a", 1)
        clock.advance(90)
        cache.set("a", 2)
        clock.advance(90)
        assert cache.get("a") == 2

    def test_evicts_oldest_tenth_when_full(self, clock):
        """Test that a full cache drops its oldest 10% before inserting."""
        cache = TTLCache("t", max_size=20, clock=clock)
        for i in range(20):
            cache.set(f"k{i}", i)
            clock.advance(1)
        cache.set("new", 99)
        assert len(cache) == 19
        assert cache.get("k0") is None
        assert cache.get("k1") is None
        assert cache.get("k2") == 2
        assert cache.get("new") == 99
        assert cache.evictions == 2

    def test_eviction_removes_at_least_one(self, clock):
        cache = TTLCache("t", max_size=3, clock=clock)
        for key in ("a", "b", "c"):
            cache.set(key, key)
            clock.advance(1)
        cache.set("d", "d")
        assert cache.get("a") is None
        assert len(cache) == 3

    def test_eviction_order_is_insertion_not_access(self, clock):
        """Test that reading an entry does not protect it from eviction."""
        cache = TTLCache("t", max_size=2, eviction_fraction=0.5, clock=clock)
        cache.set("old", 1)
        clock.advance(1)
        cache.set("young", 2)
        assert cache.get("old") == 1
        cache.set("newest", 3)
        assert cache.get("old") is None
        assert cache.get("young") == 2

    def test_sweep_removes_only_expired(self, clock):
        cache = TTLCache("t", default_ttl=60, clock=clock)
        cache.set("a", 1)
        clock.advance(50)
        cache.set("b", 2)
        clock.advance(20)
        assert cache.sweep() == 1
        assert cache.get("b") == 2

    def test_delete_and_reset_stats(self, clock):
        cache = TTLCache("t", clock=clock)
        cache.set("a", 1)
        cache.get("a")
        assert cache.delete("a") is True
        assert cache.delete("a") is False
        cache.reset_stats()
        stats = cache.stats()
        assert (stats.size, stats.hits, stats.misses, stats.evictions) == (0, 0, 0, 0)

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            TTLCache("t", max_size=0)
        with pytest.raises(ValueError):
            TTLCache("t", eviction_fraction=0)


class TestCurrencyCache:
    """Tests for the combined conversion/format cache."""

    def test_keys(self):
        assert conversion_key(CurrencyCode.USD, CurrencyCode.EUR) == "USD-EUR"
        assert format_key(100.0, CurrencyCode.GHS, "en-US") == "100.0-GHS-en-US"

    def test_caches_are_independent(self, cache):
        cache.set_conversion(CurrencyCode.USD, CurrencyCode.EUR, 0.85)
        cache.set_format(100.0, CurrencyCode.USD, "en-US", "$100.00")
        assert cache.get_conversion(CurrencyCode.USD, CurrencyCode.EUR) == 0.85
        assert cache.get_format(100.0, CurrencyCode.USD, "en-US") == "$100.00"
        assert cache.get_format(100.0, CurrencyCode.USD, "en-GB") is None

    def test_clear_empties_both(self, cache):
        cache.set_conversion(CurrencyCode.USD, CurrencyCode.EUR, 0.85)
        cache.set_format(1.0, CurrencyCode.USD, "en-US", "$1.00")
        cache.clear()
        assert cache.stats()["total_cache_size"] == 0

    def test_stats(self, cache):
        """Test sizes, capacity and hit counters."""
        cache.set_conversion(CurrencyCode.USD, CurrencyCode.EUR, 0.85)
        cache.get_conversion(CurrencyCode.USD, CurrencyCode.EUR)
        cache.get_conversion(CurrencyCode.EUR, CurrencyCode.USD)
        stats = cache.stats()
        assert stats["conversion_cache_size"] == 1
        assert stats["format_cache_size"] == 0
        assert stats["max_cache_size"] == 2000
        assert stats["conversion_hits"] == 1
        assert stats["conversion_misses"] == 1

    def test_stats_report_evictions(self, clock):
        """Test that evictions from a full cache show up in stats."""
        cache = CurrencyCache(max_size=3, clock=clock)
        for target in (CurrencyCode.EUR, CurrencyCode.GBP, CurrencyCode.GHS, CurrencyCode.NGN):
            cache.set_conversion(CurrencyCode.USD, target, 1.5)
            clock.advance(1)
        stats = cache.stats()
        assert stats["conversion_evictions"] == 1
        assert stats["format_evictions"] == 0
        assert stats["conversion_cache_size"] == 3

    def test_cleanup_sweeps_both(self, cache, clock):
        cache.set_conversion(CurrencyCode.USD, CurrencyCode.EUR, 0.85)
        cache.set_format(1.0, CurrencyCode.USD, "en-US", "$1.00")
        clock.advance(301)
        assert cache.cleanup() == 2

    def test_preload_stores_both_directions(self, cache):
        """Test that preload warms base->target and target->base."""
        rates = {("USD", "EUR"): 0.85, ("EUR", "USD"): 1.18}

        def compute(a, b):
            return rates.get((a.value, b.value))

        stored = cache.preload(CurrencyCode.USD, [CurrencyCode.USD, CurrencyCode.EUR], compute)
        assert stored == 2
        assert cache.get_conversion(CurrencyCode.EUR, CurrencyCode.USD) == 1.18

    def test_preload_skips_unavailable(self, cache):
        stored = cache.preload(CurrencyCode.USD, [CurrencyCode.CHF], lambda a, b: None)
        assert stored == 0
        assert cache.get_conversion(CurrencyCode.USD, CurrencyCode.CHF) is None


class TestSweeper:
    """Tests for the asyncio background sweep."""

    async def test_sweeper_removes_expired_entries(self, clock):
        cache = CurrencyCache(sweep_interval=0.01, clock=clock)
        cache.set_conversion(CurrencyCode.USD, CurrencyCode.EUR, 0.85)
        clock.advance(301)
        cache.start_sweeper()
        try:
            for _ in range(100):
                if len(cache.conversions) == 0:
                    break
                await asyncio.sleep(0.01)
            assert len(cache.conversions) == 0
        finally:
            await cache.stop_sweeper()

    async def test_start_is_idempotent_and_stop_cancels(self, clock):
        cache = CurrencyCache(sweep_interval=60, clock=clock)
        task = cache.start_sweeper()
        assert cache.start_sweeper() is task
        assert cache.sweeper_running
        await cache.stop_sweeper()
        assert not cache.sweeper_running
        assert task.cancelled()

    async def test_stop_without_start(self, cache):
        await cache.stop_sweeper()
        assert not cache.sweeper_running


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
