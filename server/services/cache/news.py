"""News digest cache.

One digest per calendar day. There is no automatic expiry; the bucket is
invalidated wholesale by ``clear_all``.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, true

from constants import KIND_NEWS_DIGEST
from core.logging import get_logger, log_cache_operation
from models.cache import NewsCache
from .keys import normalize_date
from .models import NewsDigest, NewsDigestRecord
from .policy import CachePolicy, ExpiryMode, as_utc, utcnow
from .repository import CacheRepository
from .validation import validate_news_digest, validate_timestamp

logger = get_logger(__name__)


class NewsDigestCacheRepository(CacheRepository):
    kind = KIND_NEWS_DIGEST
    model = NewsCache
    policy = CachePolicy(KIND_NEWS_DIGEST, ExpiryMode.MANUAL)

    async def put(self, digest: NewsDigest, cached_at: Optional[datetime] = None,
                  timeout: Optional[float] = None) -> NewsDigestRecord:
        validate_news_digest(digest)
        date = normalize_date(digest.date)
        cached_at = validate_timestamp(cached_at or utcnow(), "cachedAt")
        now = utcnow()

        stmt = self.database.upsert(
            self.table,
            {
                "date": date,
                "summary": digest.summary,
                "topics": list(digest.topics),
                "rawData": digest.raw_data,
                "isProcessed": digest.is_processed,
                "cachedAt": cached_at,
                "createdAt": now,
                "updatedAt": now,
            },
            conflict_columns=["date"],
            preserve_columns=["createdAt"],
        )
        await self._write("put", date, stmt, timeout)
        log_cache_operation(logger, "put", date, kind=self.kind)

        stored = NewsDigest(date=date, summary=digest.summary, topics=list(digest.topics),
                            raw_data=digest.raw_data, is_processed=digest.is_processed)
        return NewsDigestRecord(digest=stored, cached_at=cached_at)

    async def get(self, date, timeout: Optional[float] = None) -> Optional[NewsDigestRecord]:
        """Processed digest for ``date``; unprocessed drafts read as a miss."""
        date = normalize_date(date)
        row = await self._first("get", date, select(NewsCache).where(NewsCache.date == date), timeout)

        if row is None or not row.is_processed:
            log_cache_operation(logger, "get", date, hit=False, kind=self.kind)
            return None

        log_cache_operation(logger, "get", date, hit=True, kind=self.kind)
        digest = NewsDigest(date=row.date, summary=row.summary, topics=list(row.topics or []),
                            raw_data=row.raw_data, is_processed=row.is_processed)
        return NewsDigestRecord(digest=digest, cached_at=as_utc(row.cached_at))

    async def clear_all(self, timeout: Optional[float] = None) -> int:
        """Delete every digest unconditionally and return how many were removed."""
        deleted = await self._delete_where("clear_all", "*", true(), timeout=timeout)
        logger.info("News digest cache cleared", deleted=deleted)
        return deleted
