"""Centralized constants for cache kinds, TTLs and closed enumerations.

Single source of truth for the values shared by the table definitions,
the write-path validators and the expiry sweep.
"""

from typing import FrozenSet

# =============================================================================
# CACHE KINDS
# =============================================================================

KIND_SECURITY = "security"
KIND_ADDRESS_RISK = "address_risk"
KIND_SENTIMENT = "sentiment"
KIND_NEWS_DIGEST = "news_digest"
KIND_AUDIT = "audit"

CACHE_KINDS: FrozenSet[str] = frozenset([
    KIND_SECURITY,
    KIND_ADDRESS_RISK,
    KIND_SENTIMENT,
    KIND_NEWS_DIGEST,
    KIND_AUDIT,
])

# =============================================================================
# TABLE NAMES
# =============================================================================

SECURITY_TABLE = "sc_security_cache"
ADDRESS_RISK_TABLE = "address_risk_cache"
SENTIMENT_TABLE = "sentiment_cache"
NEWS_DIGEST_TABLE = "news_cache"
AUDIT_TABLE = "chaingpt_audit_cache"

# =============================================================================
# EXPIRY (seconds)
# =============================================================================

SECURITY_CACHE_TTL = 7 * 24 * 60 * 60      # 604800
ADDRESS_RISK_CACHE_TTL = 24 * 60 * 60      # 86400
SENTIMENT_CACHE_TTL = 7 * 24 * 60 * 60     # default expiresAt offset
AUDIT_CACHE_TTL = 30 * 24 * 60 * 60        # 2592000

# =============================================================================
# KEYS
# =============================================================================

DEFAULT_CHAIN = "bsc"
SENTIMENT_KEY_PREFIX = "sentiment"
NEWS_DATE_FORMAT = "%Y-%m-%d"

# =============================================================================
# ENUMERATIONS
# =============================================================================

SENTIMENT_TIMEFRAMES: FrozenSet[str] = frozenset(["1h", "24h", "7d", "30d"])

SENTIMENT_LABELS: FrozenSet[str] = frozenset([
    "Very Bearish",
    "Bearish",
    "Neutral",
    "Bullish",
    "Very Bullish",
])

SENTIMENT_LANGUAGES: FrozenSet[str] = frozenset(["en", "zh"])

# Score bounds (inclusive)
OVERALL_SCORE_MIN = 0.0
OVERALL_SCORE_MAX = 100.0
CONFIDENCE_MIN = 0.0
CONFIDENCE_MAX = 1.0
