"""Tests for the TTL race cache."""

import threading

import pytest

from race_feed.models import RaceRecord
from race_feed.race_cache import RaceCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def _counting_loader(races):
    calls = []

    def loader():
        calls.append(1)
        return list(races)

    return loader, calls


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return RaceCache(ttl=60, clock=clock)


class TestGet:
    def test_loads_once_while_fresh(self, cache, clock):
        loader, calls = _counting_loader([RaceRecord(name="GP")])
        cache.get("tiz", loader)
        clock.advance(59)
        assert cache.get("tiz", loader) == [RaceRecord(name="GP")]
        assert len(calls) == 1

    def test_reloads_after_ttl(self, cache, clock):
        loader, calls = _counting_loader([])
        cache.get("tiz", loader)
        clock.advance(60)
        cache.get("tiz", loader)
        assert len(calls) == 2

    def test_sources_cached_separately(self, cache):
        loader, calls = _counting_loader([])
        cache.get("a", loader)
        cache.get("b", loader)
        assert len(calls) == 2

    def test_callers_get_their_own_list(self, cache):
        loader, _ = _counting_loader([RaceRecord(name="GP")])
        first = cache.get("tiz", loader)
        first.append(RaceRecord(name="Intruder"))
        assert cache.get("tiz", loader) == [RaceRecord(name="GP")]

    def test_loader_error_propagates_and_caches_nothing(self, cache):
        def failing():
            raise RuntimeError("upstream down")

        with pytest.raises(RuntimeError):
            cache.get("tiz", failing)
        assert "tiz" not in cache


class TestEviction:
    def test_evict_expired(self, cache, clock):
        cache.get("old", lambda: [])
        clock.advance(30)
        cache.get("new", lambda: [])
        clock.advance(40)
        assert cache.evict_expired() == 1
        assert "old" not in cache
        assert "new" in cache

    def test_nothing_to_evict(self, cache):
        cache.get("tiz", lambda: [])
        assert cache.evict_expired() == 0

    def test_background_loop_evicts_until_stopped(self):
        cache = RaceCache(ttl=0)
        cache.get("tiz", lambda: [])
        evicted = threading.Event()
        original = cache.evict_expired

        def evict_and_signal():
            removed = original()
            evicted.set()
            return removed

        cache.evict_expired = evict_and_signal
        cache.start_eviction(interval=0.01)
        try:
            assert evicted.wait(2)
        finally:
            cache.stop(timeout=2)
        assert "tiz" not in cache
        assert cache._thread is None

    def test_stop_without_start(self, cache):
        cache.stop()

    def test_start_is_idempotent(self, cache):
        cache.start_eviction(interval=10)
        thread = cache._thread
        cache.start_eviction(interval=10)
        assert cache._thread is thread
        cache.stop(timeout=2)
        assert not thread.is_alive()
