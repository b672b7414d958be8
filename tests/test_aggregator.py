import asyncio

import pytest

from campusdesk.errors import SourceUnavailable
from campusdesk.faq.aggregator import SourceAggregator
from campusdesk.faq.models import FaqOrigin
from campusdesk.faq.resolver import FaqResolver

from conftest import FakeSource, faq


def _four_sources():
    return [
        FakeSource(FaqOrigin.LOCAL, [faq("Local Q", "Local A")]),
        FakeSource(FaqOrigin.STRUCTURED_STORE, [faq("Store Q", "Store A", FaqOrigin.STRUCTURED_STORE)]),
        FakeSource(FaqOrigin.FEED_A, [faq("Feed A Q", "Feed A A", FaqOrigin.FEED_A)]),
        FakeSource(FaqOrigin.FEED_B, [faq("Feed B Q", "Feed B A", FaqOrigin.FEED_B)]),
    ]


@pytest.mark.asyncio
async def test_merges_sources_in_fixed_order(clock):
    agg = SourceAggregator(_four_sources(), clock=clock)

    entries = await agg.load_all()

    assert [e.source for e in entries] == [
        FaqOrigin.LOCAL,
        FaqOrigin.STRUCTURED_STORE,
        FaqOrigin.FEED_A,
        FaqOrigin.FEED_B,
    ]


@pytest.mark.asyncio
async def test_valid_cache_is_reused_without_touching_sources(clock):
    sources = _four_sources()
    agg = SourceAggregator(sources, ttl=300, clock=clock)

    first = await agg.load_all()
    clock.now += 299
    second = await agg.load_all()

    assert first == second
    assert all(s.calls == 1 for s in sources)


@pytest.mark.asyncio
async def test_expired_cache_refetches(clock):
    sources = _four_sources()
    agg = SourceAggregator(sources, ttl=300, clock=clock)

    await agg.load_all()
    clock.now += 300
    await agg.load_all()

    assert all(s.calls == 2 for s in sources)


@pytest.mark.asyncio
async def test_force_bypasses_valid_cache(clock):
    sources = _four_sources()
    agg = SourceAggregator(sources, clock=clock)

    await agg.load_all()
    count = await agg.refresh()

    assert count == 4
    assert all(s.calls == 2 for s in sources)


@pytest.mark.asyncio
async def test_failing_source_is_isolated(clock):
    sources = _four_sources()
    sources[1].error = SourceUnavailable("structured-store", "pool not initialized")
    sources[2].error = ValueError("bad payload")
    agg = SourceAggregator(sources, clock=clock)

    entries = await agg.load_all()

    assert [e.question for e in entries] == ["Local Q", "Feed B Q"]
    assert agg.stats()["failed_sources"] == ["structured-store", "feed-a"]


@pytest.mark.asyncio
async def test_slow_source_times_out_to_empty(clock):
    sources = _four_sources()
    sources[3].delay = 1.0
    agg = SourceAggregator(sources, fetch_timeout=0.01, clock=clock)

    entries = await agg.load_all()

    assert len(entries) == 3
    assert "feed-b" in agg.stats()["failed_sources"]


@pytest.mark.asyncio
async def test_empty_pool_is_never_considered_valid(clock):
    source = FakeSource(FaqOrigin.LOCAL, [])
    agg = SourceAggregator([source], ttl=300, clock=clock)

    await agg.load_all()
    await agg.load_all()

    assert source.calls == 2


@pytest.mark.asyncio
async def test_forced_refresh_with_all_sources_failing_replaces_cache(clock):
    sources = _four_sources()
    agg = SourceAggregator(sources, clock=clock)
    resolver = FaqResolver(agg)

    await agg.load_all()
    before = agg.snapshot
    assert await resolver.find_best_faq("local q") is not None

    for s in sources:
        s.error = RuntimeError("down")
    clock.now += 1
    count = await agg.refresh()

    assert count == 0
    assert agg.snapshot.timestamp > before.timestamp
    assert agg.snapshot.entries == ()
    assert await resolver.find_best_faq("local q") is None


@pytest.mark.asyncio
async def test_concurrent_readers_see_whole_snapshots(clock):
    sources = _four_sources()
    for s in sources:
        s.delay = 0.01
    agg = SourceAggregator(sources, clock=clock)

    results = await asyncio.gather(*(agg.load_all(force=True) for _ in range(5)))

    assert all(len(r) == 4 for r in results)


@pytest.mark.asyncio
async def test_stats_reports_counts_and_refresh_time(clock):
    agg = SourceAggregator(_four_sources(), clock=clock)
    assert agg.stats()["last_refresh"] is None

    await agg.load_all()
    stats = agg.stats()

    assert stats["entries"] == 4
    assert stats["by_source"] == {"local": 1, "structured-store": 1, "feed-a": 1, "feed-b": 1}
    assert stats["refresh_count"] == 1
    assert stats["last_refresh"] is not None
