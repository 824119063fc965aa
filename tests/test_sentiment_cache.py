"""Tests for the sentiment cache."""

from datetime import datetime, timedelta, timezone

import pytest

from services.cache import SentimentCacheRepository, ValidationError, sentiment_key


def _future(**delta):
    return datetime.now(timezone.utc) + timedelta(**delta)


class TestSentimentWrite:

    @pytest.mark.asyncio
    async def test_round_trip(self, registry, make_snapshot):
        snapshot = make_snapshot()
        await registry.sentiment.put(sentiment_key("24h", lang="en"), snapshot, expires_at=_future(hours=1))

        hit = await registry.sentiment.get("sentiment_24h_en")
        assert hit is not None
        assert hit.snapshot == snapshot
        assert hit.stale is False

    @pytest.mark.asyncio
    async def test_default_expiry_is_seven_days(self, registry, make_snapshot):
        before = datetime.now(timezone.utc)
        record = await registry.sentiment.put("sentiment_7d", make_snapshot(timeframe="7d"))

        assert before + timedelta(days=7) <= record.expires_at
        assert record.expires_at <= datetime.now(timezone.utc) + timedelta(days=7)

    @pytest.mark.asyncio
    async def test_rewrite_leaves_one_row(self, registry, make_snapshot):
        key = sentiment_key("1h")
        await registry.sentiment.put(key, make_snapshot(timeframe="1h", overall_score=10))
        await registry.sentiment.put(key.upper(), make_snapshot(timeframe="1h", overall_score=90))

        assert await registry.sentiment.count() == 1
        assert (await registry.sentiment.get(key)).snapshot.overall_score == 90

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [
        {"overall_score": 150},
        {"timeframe": "2h"},
        {"confidence": 1.2},
        {"overall_label": "Sideways"},
    ])
    async def test_invalid_snapshot_rejected_before_persistence(self, settings, stub_database,
                                                                make_snapshot, overrides):
        db = stub_database()
        repo = SentimentCacheRepository(db, settings)

        with pytest.raises(ValidationError):
            await repo.put("sentiment_24h", make_snapshot(**overrides))
        assert db.sessions_opened == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["sentiment_1h_en", "not_a_sentiment_key", "sentiment_24h_fr"])
    async def test_key_must_match_snapshot_timeframe(self, settings, stub_database, make_snapshot, key):
        db = stub_database()
        repo = SentimentCacheRepository(db, settings)

        with pytest.raises(ValidationError) as exc:
            await repo.put(key, make_snapshot(timeframe="24h"))
        assert exc.value.field == "key"
        assert db.sessions_opened == 0

    @pytest.mark.asyncio
    async def test_every_stored_key_is_reachable_by_timeframe_clear(self, registry, make_snapshot):
        await registry.sentiment.put("sentiment_24h_en", make_snapshot(timeframe="24h"))
        await registry.sentiment.put("sentiment_24h_2026-10-19", make_snapshot(timeframe="24h"))
        with pytest.raises(ValidationError):
            await registry.sentiment.put("sentiment_1h_en", make_snapshot(timeframe="24h"))

        assert await registry.sentiment.clear(timeframe="24h") == 2
        assert await registry.sentiment.count() == 0

    @pytest.mark.asyncio
    async def test_invalid_snapshot_never_written(self, registry, make_snapshot):
        with pytest.raises(ValidationError):
            await registry.sentiment.put("sentiment_24h", make_snapshot(overall_score=150))
        assert await registry.sentiment.count() == 0


class TestSentimentRead:

    @pytest.mark.asyncio
    async def test_miss_when_absent(self, registry):
        assert await registry.sentiment.get("sentiment_30d") is None

    @pytest.mark.asyncio
    async def test_expired_record_is_miss_until_swept(self, registry, make_snapshot):
        expired = datetime.now(timezone.utc) - timedelta(seconds=1)
        await registry.sentiment.put("sentiment_24h", make_snapshot(), expires_at=expired)

        assert await registry.sentiment.get("sentiment_24h") is None
        assert await registry.sentiment.count() == 1

        assert await registry.sentiment.purge_expired() == 1
        assert await registry.sentiment.count() == 0

    @pytest.mark.asyncio
    async def test_freshness_follows_record_expiry_not_timeframe(self, registry, make_snapshot):
        await registry.sentiment.put("sentiment_1h", make_snapshot(timeframe="1h"), expires_at=_future(days=3))

        assert await registry.sentiment.get("sentiment_1h", now=_future(days=2)) is not None
        assert await registry.sentiment.get("sentiment_1h", now=_future(days=4)) is None

    @pytest.mark.asyncio
    async def test_get_latest_serves_stale_snapshot_flagged(self, registry, make_snapshot):
        expired = datetime.now(timezone.utc) - timedelta(hours=1)
        await registry.sentiment.put("sentiment_24h_zh", make_snapshot(), expires_at=expired)

        assert await registry.sentiment.get("sentiment_24h_en") is None

        fallback = await registry.sentiment.get_latest("24h", lang="en")
        assert fallback is not None
        assert fallback.key == "sentiment_24h_zh"
        assert fallback.stale is True

    @pytest.mark.asyncio
    async def test_get_latest_ignores_other_timeframes(self, registry, make_snapshot):
        await registry.sentiment.put("sentiment_7d_en", make_snapshot(timeframe="7d"))

        assert await registry.sentiment.get_latest("1h") is None


class TestSentimentClear:

    @pytest.fixture
    def keys(self):
        return ["sentiment_24h", "sentiment_24h_en", "sentiment_24h_zh", "sentiment_7d_en", "sentiment_1h_zh"]

    async def _seed(self, registry, make_snapshot, keys):
        for key in keys:
            timeframe = key.split("_")[1]
            await registry.sentiment.put(key, make_snapshot(timeframe=timeframe))

    @pytest.mark.asyncio
    async def test_clear_timeframe_and_language(self, registry, make_snapshot, keys):
        await self._seed(registry, make_snapshot, keys)

        assert await registry.sentiment.clear(timeframe="24h", lang="en") == 1
        assert await registry.sentiment.count() == 4

    @pytest.mark.asyncio
    async def test_clear_timeframe_all_languages(self, registry, make_snapshot, keys):
        await self._seed(registry, make_snapshot, keys)

        assert await registry.sentiment.clear(timeframe="24h") == 3
        assert await registry.sentiment.get("sentiment_7d_en") is not None

    @pytest.mark.asyncio
    async def test_clear_language_all_timeframes(self, registry, make_snapshot, keys):
        await self._seed(registry, make_snapshot, keys)

        assert await registry.sentiment.clear(lang="zh") == 2
        assert await registry.sentiment.count() == 3

    @pytest.mark.asyncio
    async def test_clear_everything(self, registry, make_snapshot, keys):
        await self._seed(registry, make_snapshot, keys)

        assert await registry.sentiment.clear() == 5
        assert await registry.sentiment.count() == 0
