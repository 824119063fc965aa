"""Shared fixtures: a throwaway SQLite database and one repository per cache kind."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import pytest
import pytest_asyncio

from core.config import Settings
from core.database import Database
from services.cache import (
    AddressRiskCacheRepository,
    AuditCacheRepository,
    CacheRegistry,
    MarketSnapshot,
    NewsDigestCacheRepository,
    NewsSentiment,
    SecurityCacheRepository,
    SentimentCacheRepository,
    SentimentSnapshot,
    SocialSentiment,
)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}",
        cleanup_enabled=False,
        cleanup_interval=1,
        log_format="console",
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings)
    await db.startup()
    yield db
    await db.shutdown()


@pytest.fixture
def registry(database, settings):
    return CacheRegistry(
        security=SecurityCacheRepository(database, settings),
        address_risk=AddressRiskCacheRepository(database, settings),
        sentiment=SentimentCacheRepository(database, settings),
        news=NewsDigestCacheRepository(database, settings),
        audit=AuditCacheRepository(database, settings),
    )


@pytest.fixture
def make_snapshot():
    """Factory for valid sentiment snapshots; override any field by keyword."""
    def factory(**overrides):
        values = dict(
            timeframe="24h",
            overall_score=62.5,
            overall_label="Bullish",
            confidence=0.8,
            news=NewsSentiment(score=70.0, articles=12, top_headlines=["BNB hits new high"]),
            social=SocialSentiment(score=55.0, mentions=340, trending=True),
            market=MarketSnapshot(price_change_24h=3.2, volume_change_24h=-1.5, dominance=4.1),
            data_timestamp=datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc),
            insights=["Volume is cooling off"],
        )
        values.update(overrides)
        return SentimentSnapshot(**values)
    return factory


class StubDatabase:
    """Stands in for Database when a test controls what the session does."""

    def __init__(self, session=None):
        self.session = session
        self.sessions_opened = 0

    @asynccontextmanager
    async def get_session(self):
        self.sessions_opened += 1
        if self.session is None:
            raise AssertionError("database was not expected to be used")
        yield self.session

    def upsert(self, table, values, conflict_columns, preserve_columns=None):
        return ("upsert", table.name, values)


@pytest.fixture
def stub_database():
    return StubDatabase
