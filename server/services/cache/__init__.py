"""Multi-entity TTL cache for externally computed analysis artifacts.

Components:
- keys: lookup key normalization
- validation: write-path checks run before any statement
- policy: freshness rules per kind
- repositories: security, address_risk, sentiment, news, audit
"""

from .address_risk import AddressRiskCacheRepository
from .audit import AuditCacheRepository
from .exceptions import (
    CacheError,
    ConstraintViolation,
    PersistenceUnavailable,
    ValidationError,
)
from .keys import CacheKey, normalize_identifier, normalize_key, normalize_qualifier, sentiment_key
from .models import (
    AddressRiskRecord,
    AuditRecord,
    AuditReport,
    MarketSnapshot,
    NewsDigest,
    NewsDigestRecord,
    NewsSentiment,
    SecurityRecord,
    SentimentRecord,
    SentimentSnapshot,
    SocialSentiment,
)
from .news import NewsDigestCacheRepository
from .policy import CachePolicy, ExpiryMode
from .registry import CacheRegistry
from .security import SecurityCacheRepository
from .sentiment import SentimentCacheRepository

__all__ = [
    # Repositories
    "AddressRiskCacheRepository",
    "AuditCacheRepository",
    "CacheRegistry",
    "NewsDigestCacheRepository",
    "SecurityCacheRepository",
    "SentimentCacheRepository",
    # Exceptions
    "CacheError",
    "ConstraintViolation",
    "PersistenceUnavailable",
    "ValidationError",
    # Keys and policy
    "CacheKey",
    "CachePolicy",
    "ExpiryMode",
    "normalize_identifier",
    "normalize_key",
    "normalize_qualifier",
    "sentiment_key",
    # Records
    "AddressRiskRecord",
    "AuditRecord",
    "AuditReport",
    "MarketSnapshot",
    "NewsDigest",
    "NewsDigestRecord",
    "NewsSentiment",
    "SecurityRecord",
    "SentimentRecord",
    "SentimentSnapshot",
    "SocialSentiment",
]
