"""Write-path validation.

Each ``validate_*`` function runs before the corresponding write issues
any statement. Nothing here touches the database.
"""

import json
import math
from datetime import datetime
from numbers import Real
from typing import Any, Dict, Optional

from constants import (
    CONFIDENCE_MAX,
    CONFIDENCE_MIN,
    OVERALL_SCORE_MAX,
    OVERALL_SCORE_MIN,
    SENTIMENT_LABELS,
    SENTIMENT_TIMEFRAMES,
)
from .exceptions import ValidationError
from .keys import normalize_date
from .models import (
    AuditReport,
    MarketSnapshot,
    NewsDigest,
    NewsSentiment,
    SentimentSnapshot,
    SocialSentiment,
)
from .policy import as_utc


def validate_timestamp(value: Optional[datetime], field: str = "cachedAt") -> datetime:
    """Require a datetime and return it in UTC."""
    if value is None:
        raise ValidationError(field, "timestamp is required")
    if not isinstance(value, datetime):
        raise ValidationError(field, f"expected a datetime, got {type(value).__name__}")
    return as_utc(value)


def validate_number(value: Any, field: str, low: Optional[float] = None,
                    high: Optional[float] = None) -> float:
    # bool is a Real subclass; a flag is never a score
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(field, f"expected a number, got {type(value).__name__}")
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(field, "must be finite")
    if low is not None and number < low:
        raise ValidationError(field, f"{number} is below {low}")
    if high is not None and number > high:
        raise ValidationError(field, f"{number} is above {high}")
    return number


def validate_count(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, f"expected an integer, got {type(value).__name__}")
    if value < 0:
        raise ValidationError(field, "must not be negative")
    return value


def validate_choice(value: Any, field: str, choices) -> str:
    if value not in choices:
        raise ValidationError(field, f"'{value}' is not one of {sorted(choices)}")
    return value


def validate_payload(value: Any, field: str) -> Dict[str, Any]:
    """Opaque artifact payloads must be JSON objects that read back unchanged."""
    if not isinstance(value, dict):
        raise ValidationError(field, f"expected an object, got {type(value).__name__}")
    try:
        decoded = json.loads(json.dumps(value, allow_nan=False))
    except (TypeError, ValueError) as e:
        raise ValidationError(field, f"not JSON serializable: {e}") from None
    # Non-string keys and tuples come back as strings and lists
    if decoded != value:
        raise ValidationError(field, "changes under JSON encoding")
    return value


def validate_string_list(value: Any, field: str) -> list:
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValidationError(field, "expected a list of strings")
    return list(value)


def validate_sentiment(snapshot: SentimentSnapshot) -> SentimentSnapshot:
    """Check ranges and enumerations of a sentiment snapshot."""
    if not isinstance(snapshot, SentimentSnapshot):
        raise ValidationError("snapshot", f"expected SentimentSnapshot, got {type(snapshot).__name__}")

    validate_choice(snapshot.timeframe, "timeframe", SENTIMENT_TIMEFRAMES)
    validate_choice(snapshot.overall_label, "overallLabel", SENTIMENT_LABELS)
    validate_number(snapshot.overall_score, "overallScore", OVERALL_SCORE_MIN, OVERALL_SCORE_MAX)
    validate_number(snapshot.confidence, "confidence", CONFIDENCE_MIN, CONFIDENCE_MAX)
    validate_timestamp(snapshot.data_timestamp, "dataTimestamp")
    validate_string_list(snapshot.insights, "insights")

    if not isinstance(snapshot.news, NewsSentiment):
        raise ValidationError("newsData", "expected NewsSentiment")
    validate_number(snapshot.news.score, "newsData.score")
    validate_count(snapshot.news.articles, "newsData.articles")
    validate_string_list(snapshot.news.top_headlines, "newsData.topHeadlines")

    if not isinstance(snapshot.social, SocialSentiment):
        raise ValidationError("socialData", "expected SocialSentiment")
    validate_number(snapshot.social.score, "socialData.score")
    validate_count(snapshot.social.mentions, "socialData.mentions")
    if not isinstance(snapshot.social.trending, bool):
        raise ValidationError("socialData.trending", "expected a boolean")

    if not isinstance(snapshot.market, MarketSnapshot):
        raise ValidationError("marketData", "expected MarketSnapshot")
    validate_number(snapshot.market.price_change_24h, "marketData.priceChange24h")
    validate_number(snapshot.market.volume_change_24h, "marketData.volumeChange24h")
    validate_number(snapshot.market.dominance, "marketData.dominance")

    return snapshot


def validate_news_digest(digest: NewsDigest) -> NewsDigest:
    if not isinstance(digest, NewsDigest):
        raise ValidationError("digest", f"expected NewsDigest, got {type(digest).__name__}")
    normalize_date(digest.date)
    if not isinstance(digest.summary, str):
        raise ValidationError("summary", "expected a string")
    validate_string_list(digest.topics, "topics")
    if digest.raw_data is not None and not isinstance(digest.raw_data, str):
        raise ValidationError("rawData", "expected a string")
    if not isinstance(digest.is_processed, bool):
        raise ValidationError("isProcessed", "expected a boolean")
    return digest


def validate_chain_id(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError("chainId", f"expected a positive integer, got {value!r}")
    return value


def validate_audit_report(report: AuditReport) -> AuditReport:
    if not isinstance(report, AuditReport):
        raise ValidationError("report", f"expected AuditReport, got {type(report).__name__}")
    if not isinstance(report.audit_report, str) or not report.audit_report.strip():
        raise ValidationError("auditReport", "must not be empty")
    validate_timestamp(report.audited_at, "auditedAt")
    if report.vulnerabilities is not None:
        validate_payload(report.vulnerabilities, "vulnerabilities")
        for severity, findings in report.vulnerabilities.items():
            validate_string_list(findings, f"vulnerabilities.{severity}")
    return report
