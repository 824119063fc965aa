"""HTTP surface: health, stats and the manual news clear."""

import asyncio

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from core.container import container
from core.database import Database
from main import app
from services.cache import NewsDigest, NewsDigestCacheRepository, SecurityCacheRepository


async def _seed(settings):
    db = Database(settings)
    await db.startup()
    try:
        news = NewsDigestCacheRepository(db, settings)
        for day in range(1, 6):
            await news.put(NewsDigest(date=f"2026-10-{day:02d}", summary="s", topics=[], raw_data="{}"))
        await SecurityCacheRepository(db, settings).put("0xabc", {"score": 1})
    finally:
        await db.shutdown()


@pytest.fixture
def client(settings):
    asyncio.run(_seed(settings))
    container.settings.override(providers.Object(settings))
    container.reset_singletons()
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        container.settings.reset_override()
        container.reset_singletons()


def test_stats_reports_rows_per_kind(client):
    response = client.get("/api/cache/stats")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["counts"]["news_digest"] == 5
    assert body["counts"]["security"] == 1
    assert body["counts"]["sentiment"] == 0


def test_clear_news_reports_deleted_count(client):
    response = client.post("/api/cache/news/clear")

    assert response.status_code == 200
    assert response.json() == {"success": True, "deleted": 5}

    again = client.post("/api/cache/news/clear")
    assert again.json() == {"success": True, "deleted": 0}

    stats = client.get("/api/cache/stats").json()
    assert stats["counts"]["news_digest"] == 0
    assert stats["counts"]["security"] == 1


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["checks"]["database"] is True
    assert body["cache"]["news_digest"] == 5
    assert body["cleanup"]["enabled"] is False
    assert body["cleanup"]["running"] is False
