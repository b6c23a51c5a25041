"""Tests for specquery.cache.SpecCache."""

from __future__ import annotations

import pytest

from specquery.cache import SpecCache
from specquery.models import ParsedSpec


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> SpecCache:
    return SpecCache(default_ttl=60, clock=clock)


class TestGetSet:
    def test_miss(self, cache: SpecCache) -> None:
        assert cache.get("nope") is None

    def test_hit(self, cache: SpecCache, petstore_30_spec: ParsedSpec) -> None:
        cache.set("current", petstore_30_spec)
        assert cache.get("current") is petstore_30_spec

    def test_replace(
        self, cache: SpecCache, petstore_30_spec: ParsedSpec, swagger_20_spec: ParsedSpec
    ) -> None:
        cache.set("current", petstore_30_spec)
        cache.set("current", swagger_20_spec)
        assert cache.get("current") is swagger_20_spec


class TestExpiry:
    def test_expires_after_default_ttl(
        self, cache: SpecCache, clock: FakeClock, petstore_30_spec: ParsedSpec
    ) -> None:
        cache.set("current", petstore_30_spec)

        clock.advance(59)
        assert cache.get("current") is petstore_30_spec

        clock.advance(1)
        assert cache.get("current") is None
        assert cache.stats()["size"] == 0

    def test_per_entry_ttl(
        self, cache: SpecCache, clock: FakeClock, petstore_30_spec: ParsedSpec
    ) -> None:
        cache.set("short", petstore_30_spec, ttl=5)
        cache.set("long", petstore_30_spec)

        clock.advance(10)

        assert cache.get("short") is None
        assert cache.get("long") is petstore_30_spec

    def test_zero_ttl_is_never_served(self, clock: FakeClock, petstore_30_spec: ParsedSpec) -> None:
        cache = SpecCache(default_ttl=0, clock=clock)
        cache.set("current", petstore_30_spec)
        assert cache.get("current") is None

    def test_is_stale(self, cache: SpecCache, clock: FakeClock, petstore_30_spec: ParsedSpec) -> None:
        assert cache.is_stale("current") is True

        cache.set("current", petstore_30_spec)
        assert cache.is_stale("current") is False
        assert cache.is_stale("current", within=60) is True

        clock.advance(60)
        assert cache.is_stale("current") is True
        # is_stale never evicts
        assert cache.stats()["size"] == 1


class TestManagement:
    def test_invalidate(self, cache: SpecCache, petstore_30_spec: ParsedSpec) -> None:
        cache.set("current", petstore_30_spec)
        assert cache.invalidate("current") is True
        assert cache.invalidate("current") is False
        assert cache.get("current") is None

    def test_clear(self, cache: SpecCache, petstore_30_spec: ParsedSpec) -> None:
        cache.set("a", petstore_30_spec)
        cache.set("b", petstore_30_spec)
        cache.clear()
        assert cache.stats()["size"] == 0

    def test_stats(self, cache: SpecCache, petstore_30_spec: ParsedSpec) -> None:
        cache.set("b", petstore_30_spec)
        cache.set("a", petstore_30_spec)
        assert cache.stats() == {"size": 2, "keys": ["a", "b"], "default_ttl": 60}
        assert cache.default_ttl == 60
