"""Market sentiment cache.

Each record carries its own expiresAt because different timeframes imply
different validity windows. The key index is not unique, so a write
replaces every row for its key inside one transaction.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession

from constants import KIND_SENTIMENT, SENTIMENT_KEY_PREFIX
from core.logging import get_logger, log_cache_operation
from models.cache import SentimentCache
from .keys import check_sentiment_key, normalize_language, normalize_sentiment_key, sentiment_key
from .models import (
    MarketSnapshot,
    NewsSentiment,
    SentimentRecord,
    SentimentSnapshot,
    SocialSentiment,
)
from .policy import CachePolicy, ExpiryMode, as_utc, utcnow
from .repository import CacheRepository
from .validation import validate_sentiment, validate_timestamp

logger = get_logger(__name__)


def _like_literal(value: str) -> str:
    """Escape LIKE wildcards; sentiment keys contain underscores."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SentimentCacheRepository(CacheRepository):
    kind = KIND_SENTIMENT
    model = SentimentCache

    def __init__(self, database, settings):
        super().__init__(database, settings)
        self.policy = CachePolicy(KIND_SENTIMENT, ExpiryMode.RECORD_EXPIRY)
        self.default_ttl = timedelta(seconds=settings.sentiment_cache_ttl)

    async def put(self, key: str, snapshot: SentimentSnapshot,
                  expires_at: Optional[datetime] = None,
                  timeout: Optional[float] = None) -> SentimentRecord:
        """Replace the snapshot stored under ``key``.

        ``expires_at`` defaults to now plus the configured sentiment TTL.
        """
        validate_sentiment(snapshot)
        key = check_sentiment_key(key, snapshot.timeframe)
        now = utcnow()
        expires_at = validate_timestamp(expires_at or now + self.default_ttl, "expiresAt")

        row = SentimentCache(
            key=key,
            timeframe=snapshot.timeframe,
            overall_score=float(snapshot.overall_score),
            overall_label=snapshot.overall_label,
            confidence=float(snapshot.confidence),
            news_data=snapshot.news.to_document(),
            social_data=snapshot.social.to_document(),
            market_data=snapshot.market.to_document(),
            insights=list(snapshot.insights),
            data_timestamp=as_utc(snapshot.data_timestamp),
            expires_at=expires_at,
            created_at=now,
            updated_at=now,
        )

        async def work(session: AsyncSession) -> None:
            await session.execute(delete(SentimentCache).where(SentimentCache.key == key))
            session.add(row)
            await session.commit()

        await self._run("put", key, work, timeout)
        log_cache_operation(logger, "put", key, kind=self.kind, expires_at=expires_at.isoformat())

        return SentimentRecord(key=key, snapshot=snapshot, expires_at=expires_at)

    async def get(self, key: str, now: Optional[datetime] = None,
                  timeout: Optional[float] = None) -> Optional[SentimentRecord]:
        """Newest unexpired snapshot for ``key``, or None."""
        key = normalize_sentiment_key(key)
        stmt = (
            select(SentimentCache)
            .where(SentimentCache.key == key)
            .order_by(SentimentCache.created_at.desc(), SentimentCache.id.desc())
        )
        row = await self._first("get", key, stmt, timeout)

        if row is None or not self.policy.is_fresh(expires_at=row.expires_at, now=now):
            log_cache_operation(logger, "get", key, hit=False, kind=self.kind,
                                stale=row is not None)
            return None

        log_cache_operation(logger, "get", key, hit=True, kind=self.kind)
        return self._to_record(row)

    async def get_latest(self, timeframe: str, lang: Optional[str] = None,
                         now: Optional[datetime] = None,
                         timeout: Optional[float] = None) -> Optional[SentimentRecord]:
        """Newest snapshot for a timeframe regardless of expiry.

        Fallback for callers whose upstream refresh failed. Matches the
        language key, the bare timeframe key, or any suffixed key for the
        timeframe; expired rows come back with ``stale=True``.
        """
        base = sentiment_key(timeframe)
        candidates = [SentimentCache.key == base,
                      SentimentCache.key.like(_like_literal(base + "_") + "%", escape="\\")]
        if lang is not None:
            candidates.insert(0, SentimentCache.key == sentiment_key(timeframe, lang=lang))

        stmt = (
            select(SentimentCache)
            .where(or_(*candidates))
            .order_by(SentimentCache.created_at.desc(), SentimentCache.id.desc())
        )
        row = await self._first("get_latest", base, stmt, timeout)
        if row is None:
            return None

        record = self._to_record(row)
        record.stale = not self.policy.is_fresh(expires_at=row.expires_at, now=now)
        if record.stale:
            logger.warning("Serving stale sentiment snapshot", cache_key=row.key,
                           expires_at=record.expires_at.isoformat())
        return record

    async def clear(self, timeframe: Optional[str] = None, lang: Optional[str] = None,
                    timeout: Optional[float] = None) -> int:
        """Delete snapshots for a timeframe, a language, both, or everything."""
        if timeframe and lang:
            criteria = SentimentCache.key == sentiment_key(timeframe, lang=lang)
            scope = sentiment_key(timeframe, lang=lang)
        elif timeframe:
            base = sentiment_key(timeframe)
            criteria = or_(SentimentCache.key == base,
                           SentimentCache.key.like(_like_literal(base + "_") + "%", escape="\\"))
            scope = base
        elif lang:
            suffix = "_" + normalize_language(lang)
            criteria = SentimentCache.key.like(
                _like_literal(SENTIMENT_KEY_PREFIX + "_") + "%" + _like_literal(suffix), escape="\\"
            )
            scope = "*" + suffix
        else:
            criteria = true()
            scope = "*"

        deleted = await self._delete_where("clear", scope, criteria, timeout=timeout)
        logger.info("Cleared sentiment cache", scope=scope, deleted=deleted)
        return deleted

    async def purge_expired(self, now: Optional[datetime] = None,
                            timeout: Optional[float] = None) -> int:
        return await self._delete_where(
            "purge_expired", "*",
            SentimentCache.expires_at <= as_utc(self._now(now)),
            timeout=timeout,
        )

    @staticmethod
    def _to_record(row: SentimentCache) -> SentimentRecord:
        snapshot = SentimentSnapshot(
            timeframe=row.timeframe,
            overall_score=row.overall_score,
            overall_label=row.overall_label,
            confidence=row.confidence,
            news=NewsSentiment.from_document(row.news_data),
            social=SocialSentiment.from_document(row.social_data),
            market=MarketSnapshot.from_document(row.market_data),
            data_timestamp=as_utc(row.data_timestamp),
            insights=list(row.insights or []),
        )
        return SentimentRecord(key=row.key, snapshot=snapshot, expires_at=as_utc(row.expires_at))
