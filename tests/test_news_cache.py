"""Tests for the news digest cache and its manual clear."""

from datetime import date

import pytest

from services.cache import NewsDigest, ValidationError


def _digest(day: str, **overrides) -> NewsDigest:
    values = dict(
        date=day,
        summary=f"BSC roundup for {day}",
        topics=["PancakeSwap v4", "New listings"],
        raw_data='{"results": []}',
        is_processed=True,
    )
    values.update(overrides)
    return NewsDigest(**values)


@pytest.mark.asyncio
async def test_round_trip(registry):
    await registry.news.put(_digest("2026-10-19"))

    hit = await registry.news.get("2026-10-19")
    assert hit.digest.summary == "BSC roundup for 2026-10-19"
    assert hit.digest.topics == ["PancakeSwap v4", "New listings"]
    assert hit.cached_at is not None


@pytest.mark.asyncio
async def test_lookup_by_date_object(registry):
    await registry.news.put(_digest("2026-10-19"))

    assert await registry.news.get(date(2026, 10, 19)) is not None


@pytest.mark.asyncio
async def test_unprocessed_digest_reads_as_miss(registry):
    await registry.news.put(_digest("2026-10-19", is_processed=False))

    assert await registry.news.get("2026-10-19") is None
    assert await registry.news.count() == 1


@pytest.mark.asyncio
async def test_rewrite_same_day_replaces(registry):
    await registry.news.put(_digest("2026-10-19", summary="draft", topics=["a", "b", "c"]))
    await registry.news.put(_digest("2026-10-19", summary="final", topics=["z"]))

    assert await registry.news.count() == 1
    hit = await registry.news.get("2026-10-19")
    assert hit.digest.summary == "final"
    assert hit.digest.topics == ["z"]


@pytest.mark.asyncio
async def test_clear_all_reports_count_and_empties_bucket(registry):
    days = [f"2026-10-{day:02d}" for day in range(1, 6)]
    for day in days:
        await registry.news.put(_digest(day))

    assert await registry.news.clear_all() == 5
    for day in days:
        assert await registry.news.get(day) is None


@pytest.mark.asyncio
async def test_clear_all_on_empty_bucket(registry):
    assert await registry.news.clear_all() == 0


@pytest.mark.asyncio
async def test_news_has_no_automatic_expiry(registry):
    await registry.news.put(_digest("2000-01-01"))

    assert not hasattr(registry.news, "purge_expired")
    assert registry.news not in registry.expiring
    assert "news_digest" not in await registry.purge_expired()
    assert await registry.news.get("2000-01-01") is not None


@pytest.mark.asyncio
async def test_malformed_date_rejected(registry):
    with pytest.raises(ValidationError):
        await registry.news.put(_digest("19-10-2026"))
