"""Expiry policies per cache kind.

Freshness is always decided here, never by the physical presence of a
row: the sweep removes expired rows late, so a row can outlive its
logical expiry by up to one sweep interval.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional


class ExpiryMode(str, Enum):
    """How a kind decides that a record is stale."""
    FIXED_TTL = "fixed_ttl"          # cachedAt + ttl
    RECORD_EXPIRY = "record_expiry"  # per-record expiresAt
    MANUAL = "manual"                # never stale, cleared explicitly


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class CachePolicy:
    kind: str
    mode: ExpiryMode
    ttl_seconds: Optional[int] = None

    @property
    def ttl(self) -> Optional[timedelta]:
        return timedelta(seconds=self.ttl_seconds) if self.ttl_seconds is not None else None

    def expires_at(self, cached_at: datetime) -> Optional[datetime]:
        """Logical expiry of a record written at ``cached_at``."""
        if self.mode == ExpiryMode.MANUAL or self.ttl is None:
            return None
        return as_utc(cached_at) + self.ttl

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        """Oldest cachedAt still fresh at ``now`` (fixed-TTL kinds only)."""
        if self.mode != ExpiryMode.FIXED_TTL:
            raise ValueError(f"{self.kind} has no fixed TTL")
        return as_utc(now or utcnow()) - self.ttl

    def is_fresh(self, cached_at: Optional[datetime] = None,
                 expires_at: Optional[datetime] = None,
                 now: Optional[datetime] = None) -> bool:
        now = as_utc(now or utcnow())

        if self.mode == ExpiryMode.MANUAL:
            return True
        if self.mode == ExpiryMode.FIXED_TTL:
            if cached_at is None:
                return False
            return self.expires_at(cached_at) > now
        if expires_at is None:
            return False
        return as_utc(expires_at) > now
