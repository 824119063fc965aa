"""Domain records returned by the cache repositories.

Plain dataclasses with no implicit validation; every write goes through
``validation.py`` first. ``to_document`` renders the persisted layout.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, List, Optional


@dataclass
class SecurityRecord:
    contract_address: str
    chain: str
    security_data: Dict[str, Any]
    cached_at: datetime


@dataclass
class AddressRiskRecord:
    address: str
    network: str
    risk_data: Dict[str, Any]
    cached_at: datetime


# =============================================================================
# SENTIMENT
# =============================================================================

@dataclass
class NewsSentiment:
    score: float
    articles: int
    top_headlines: List[str] = field(default_factory=list)

    def to_document(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "articles": self.articles,
            "topHeadlines": list(self.top_headlines),
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "NewsSentiment":
        return cls(
            score=data["score"],
            articles=data["articles"],
            top_headlines=list(data.get("topHeadlines", [])),
        )


@dataclass
class SocialSentiment:
    score: float
    mentions: int
    trending: bool

    def to_document(self) -> Dict[str, Any]:
        return {"score": self.score, "mentions": self.mentions, "trending": self.trending}

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "SocialSentiment":
        return cls(score=data["score"], mentions=data["mentions"], trending=data["trending"])


@dataclass
class MarketSnapshot:
    price_change_24h: float
    volume_change_24h: float
    dominance: float

    def to_document(self) -> Dict[str, Any]:
        return {
            "priceChange24h": self.price_change_24h,
            "volumeChange24h": self.volume_change_24h,
            "dominance": self.dominance,
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "MarketSnapshot":
        return cls(
            price_change_24h=data["priceChange24h"],
            volume_change_24h=data["volumeChange24h"],
            dominance=data["dominance"],
        )


@dataclass
class SentimentSnapshot:
    """One computed market sentiment reading.

    overall_score is 0-100, confidence 0-1; data_timestamp is when the
    upstream data was generated, not when it was cached.
    """
    timeframe: str
    overall_score: float
    overall_label: str
    confidence: float
    news: NewsSentiment
    social: SocialSentiment
    market: MarketSnapshot
    data_timestamp: datetime
    insights: List[str] = field(default_factory=list)


@dataclass
class SentimentRecord:
    key: str
    snapshot: SentimentSnapshot
    expires_at: datetime
    stale: bool = False  # only set by last-resort reads


# =============================================================================
# NEWS DIGEST
# =============================================================================

@dataclass
class NewsDigest:
    date: str
    summary: str
    topics: List[str] = field(default_factory=list)
    raw_data: Optional[str] = None
    is_processed: bool = True


@dataclass
class NewsDigestRecord:
    digest: NewsDigest
    cached_at: datetime


# =============================================================================
# CONTRACT AUDIT
# =============================================================================

@dataclass
class AuditReport:
    audit_report: str
    audited_at: datetime
    contract_name: Optional[str] = None
    summary: Optional[str] = None
    vulnerabilities: Optional[Dict[str, List[str]]] = None
    compiler_version: Optional[str] = None


@dataclass
class AuditRecord:
    contract_address: str
    chain_id: int
    report: AuditReport
    expires_at: datetime
    hit_count: int = 0
    last_accessed_at: Optional[datetime] = None
