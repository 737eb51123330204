import asyncio

import pytest

from inverse_arena.cache import QueryCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture()
def clock():
    return FakeClock()


def _counting_fetcher(value="fresh"):
    calls = []

    async def fetch():
        calls.append(1)
        return f"{value}-{len(calls)}"

    return fetch, calls


@pytest.mark.asyncio
async def test_fresh_value_is_reused(clock):
    cache = QueryCache(stale_seconds=10, clock=clock)
    fetch, calls = _counting_fetcher()

    assert await cache.get_or_fetch(("arenas", 5), fetch) == "fresh-1"
    clock.now = 9.9
    assert await cache.get_or_fetch(("arenas", 5), fetch) == "fresh-1"
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_stale_value_is_refetched(clock):
    cache = QueryCache(stale_seconds=10, clock=clock)
    fetch, calls = _counting_fetcher()

    await cache.get_or_fetch(("arenas", 5), fetch)
    clock.now = 10.0

    assert await cache.get_or_fetch(("arenas", 5), fetch) == "fresh-2"
    assert cache.peek(("arenas", 5)) == "fresh-2"


@pytest.mark.asyncio
async def test_failures_are_not_cached(clock):
    cache = QueryCache(clock=clock)

    async def broken():
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        await cache.get_or_fetch(("global_stats",), broken)

    assert ("global_stats",) not in cache


def test_peek_ignores_stale_entries(clock):
    cache = QueryCache(stale_seconds=5, clock=clock)
    cache.put(("profile", "0xabc"), "value")

    assert cache.peek(("profile", "0xabc")) == "value"
    clock.now = 6
    assert cache.peek(("profile", "0xabc")) is None
    assert cache.peek(("missing",)) is None


def test_invalidate_by_prefix(clock):
    cache = QueryCache(clock=clock)
    cache.put(("arena_state", 7, None), 1)
    cache.put(("arena_state", 7, "0xabc"), 2)
    cache.put(("arena_state", 8, None), 3)
    cache.put(("arenas", 5), 4)

    assert cache.invalidate("arena_state", 7) == 2
    assert ("arena_state", 8, None) in cache
    assert ("arenas", 5) in cache

    assert cache.invalidate() == 2
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_invalidation_during_fetch_drops_the_result(clock):
    cache = QueryCache(stale_seconds=10, clock=clock)
    release = asyncio.Event()

    async def slow_fetch():
        await release.wait()
        return "pre-write"

    async def fresh_fetch():
        return "post-write"

    in_flight = asyncio.create_task(cache.get_or_fetch(("arenas", 5), slow_fetch))
    await asyncio.sleep(0)
    cache.invalidate("arenas")
    release.set()

    assert await in_flight == "pre-write"
    assert ("arenas", 5) not in cache
    assert await cache.get_or_fetch(("arenas", 5), fresh_fetch) == "post-write"


@pytest.mark.asyncio
async def test_unrelated_invalidation_keeps_the_result(clock):
    cache = QueryCache(stale_seconds=10, clock=clock)
    release = asyncio.Event()

    async def slow_fetch():
        await release.wait()
        return "stats"

    in_flight = asyncio.create_task(cache.get_or_fetch(("global_stats",), slow_fetch))
    await asyncio.sleep(0)
    cache.invalidate("creator_status")
    release.set()
    await in_flight

    assert cache.peek(("global_stats",)) == "stats"
