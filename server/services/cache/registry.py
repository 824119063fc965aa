"""Aggregate of all cache repositories, built once at process start."""

from datetime import datetime
from typing import Dict, List, Optional

from core.logging import get_logger
from .address_risk import AddressRiskCacheRepository
from .audit import AuditCacheRepository
from .news import NewsDigestCacheRepository
from .policy import ExpiryMode
from .repository import CacheRepository
from .security import SecurityCacheRepository
from .sentiment import SentimentCacheRepository

logger = get_logger(__name__)


class CacheRegistry:
    def __init__(
        self,
        security: SecurityCacheRepository,
        address_risk: AddressRiskCacheRepository,
        sentiment: SentimentCacheRepository,
        news: NewsDigestCacheRepository,
        audit: AuditCacheRepository,
    ):
        self.security = security
        self.address_risk = address_risk
        self.sentiment = sentiment
        self.news = news
        self.audit = audit

    @property
    def repositories(self) -> List[CacheRepository]:
        return [self.security, self.address_risk, self.sentiment, self.news, self.audit]

    @property
    def expiring(self) -> List[CacheRepository]:
        """Repositories whose rows expire on their own."""
        return [repo for repo in self.repositories if repo.policy.mode != ExpiryMode.MANUAL]

    async def counts(self) -> Dict[str, int]:
        return {repo.kind: await repo.count() for repo in self.repositories}

    async def purge_expired(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """Sweep every expiring kind once. One failing kind does not stop the others."""
        results = {}
        for repo in self.expiring:
            try:
                results[repo.kind] = await repo.purge_expired(now=now)
            except Exception as e:
                logger.warning("Failed to purge expired cache rows", kind=repo.kind, error=str(e))
                results[repo.kind] = 0
        return results
