"""Lookup key normalization.

All functions here are pure. Identifiers and chain/network qualifiers are
trimmed and lowercased so that case or surrounding whitespace never yields
a second record for the same artifact.
"""

from datetime import date as date_type, datetime
from typing import NamedTuple, Optional, Union

from constants import (
    DEFAULT_CHAIN,
    NEWS_DATE_FORMAT,
    SENTIMENT_KEY_PREFIX,
    SENTIMENT_LANGUAGES,
    SENTIMENT_TIMEFRAMES,
)
from .exceptions import ValidationError


class CacheKey(NamedTuple):
    """Normalized (identifier, qualifier) pair."""
    identifier: str
    qualifier: str

    def __str__(self) -> str:
        return f"{self.identifier}:{self.qualifier}"


def normalize_identifier(raw: str, field: str = "identifier") -> str:
    """Trim and lowercase an address or contract identifier."""
    if not isinstance(raw, str):
        raise ValidationError(field, f"expected a string, got {type(raw).__name__}")
    value = raw.strip().lower()
    if not value:
        raise ValidationError(field, "must not be empty")
    return value


def normalize_qualifier(raw: Optional[str], default: str = DEFAULT_CHAIN,
                        field: str = "chain") -> str:
    """Trim and lowercase a chain/network qualifier, falling back to ``default``."""
    if raw is None:
        return default.strip().lower()
    if not isinstance(raw, str):
        raise ValidationError(field, f"expected a string, got {type(raw).__name__}")
    value = raw.strip().lower()
    return value or default.strip().lower()


def normalize_key(identifier: str, qualifier: Optional[str] = None,
                  default: str = DEFAULT_CHAIN) -> CacheKey:
    """Canonical key for the (identifier, chain/network) caches.

    Idempotent: ``normalize_key(*normalize_key(i, q)) == normalize_key(i, q)``.
    """
    return CacheKey(normalize_identifier(identifier), normalize_qualifier(qualifier, default))


def sentiment_key(timeframe: str, lang: Optional[str] = None,
                  date: Optional[Union[str, date_type, datetime]] = None) -> str:
    """Build a sentiment cache key.

    ``sentiment_{timeframe}``, ``sentiment_{timeframe}_{lang}`` or
    ``sentiment_{timeframe}_{date}``. Language and date are mutually exclusive.
    """
    if not isinstance(timeframe, str) or timeframe.strip().lower() not in SENTIMENT_TIMEFRAMES:
        raise ValidationError("timeframe", f"must be one of {sorted(SENTIMENT_TIMEFRAMES)}")
    if lang is not None and date is not None:
        raise ValidationError("key", "lang and date suffixes cannot be combined")

    parts = [SENTIMENT_KEY_PREFIX, timeframe.strip().lower()]
    if lang is not None:
        parts.append(normalize_language(lang))
    elif date is not None:
        parts.append(normalize_date(date))
    return "_".join(parts)


def normalize_sentiment_key(raw: str) -> str:
    """Trim and lowercase a caller-supplied sentiment key."""
    return normalize_identifier(raw, field="key")


def check_sentiment_key(key: str, timeframe: str) -> str:
    """Require ``key`` to be a sentiment key built for ``timeframe``.

    Accepts ``sentiment_{timeframe}`` optionally followed by ``_{lang}`` or
    ``_{YYYY-MM-DD}``; anything else could not be reached by timeframe or
    language clears and fallbacks.
    """
    key = normalize_sentiment_key(key)
    base = sentiment_key(timeframe)
    if key == base:
        return key

    suffix = key[len(base) + 1:] if key.startswith(base + "_") else None
    if suffix in SENTIMENT_LANGUAGES:
        return key
    if suffix:
        try:
            if normalize_date(suffix) == suffix:
                return key
        except ValidationError:
            pass
    raise ValidationError("key", f"'{key}' is not a sentiment key for timeframe '{timeframe}'")


def normalize_language(lang: str) -> str:
    if not isinstance(lang, str) or lang.strip().lower() not in SENTIMENT_LANGUAGES:
        raise ValidationError("lang", f"must be one of {sorted(SENTIMENT_LANGUAGES)}")
    return lang.strip().lower()


def normalize_date(value: Union[str, date_type, datetime]) -> str:
    """Render a digest date as YYYY-MM-DD, validating string input."""
    if isinstance(value, datetime):
        return value.strftime(NEWS_DATE_FORMAT)
    if isinstance(value, date_type):
        return value.strftime(NEWS_DATE_FORMAT)
    if isinstance(value, str):
        stripped = value.strip()
        try:
            return datetime.strptime(stripped, NEWS_DATE_FORMAT).strftime(NEWS_DATE_FORMAT)
        except ValueError:
            raise ValidationError("date", f"expected YYYY-MM-DD, got '{value}'") from None
    raise ValidationError("date", f"expected a date or YYYY-MM-DD string, got {type(value).__name__}")
