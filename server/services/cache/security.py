"""Smart contract security analysis cache (7-day TTL on cachedAt)."""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select

from constants import KIND_SECURITY
from core.logging import get_logger, log_cache_operation
from models.cache import SCSecurityCache
from .keys import normalize_key
from .models import SecurityRecord
from .policy import CachePolicy, ExpiryMode, as_utc, utcnow
from .repository import CacheRepository
from .validation import validate_payload, validate_timestamp

logger = get_logger(__name__)


class SecurityCacheRepository(CacheRepository):
    """Keyed by (contractAddress, chain); chain defaults to the configured chain."""

    kind = KIND_SECURITY
    model = SCSecurityCache

    def __init__(self, database, settings):
        super().__init__(database, settings)
        self.policy = CachePolicy(KIND_SECURITY, ExpiryMode.FIXED_TTL, settings.security_cache_ttl)

    def _key(self, contract_address: str, chain: Optional[str]):
        return normalize_key(contract_address, chain, self.settings.default_chain)

    async def put(self, contract_address: str, security_data: Dict[str, Any],
                  chain: Optional[str] = None, cached_at: Optional[datetime] = None,
                  timeout: Optional[float] = None) -> SecurityRecord:
        """Insert or fully replace the analysis for a contract."""
        key = self._key(contract_address, chain)
        validate_payload(security_data, "securityData")
        cached_at = validate_timestamp(cached_at or utcnow(), "cachedAt")
        now = utcnow()

        stmt = self.database.upsert(
            self.table,
            {
                "contractAddress": key.identifier,
                "chain": key.qualifier,
                "securityData": security_data,
                "cachedAt": cached_at,
                "createdAt": now,
                "updatedAt": now,
            },
            conflict_columns=["contractAddress", "chain"],
            preserve_columns=["createdAt"],
        )
        await self._write("put", str(key), stmt, timeout)
        log_cache_operation(logger, "put", str(key), kind=self.kind)

        return SecurityRecord(key.identifier, key.qualifier, security_data, cached_at)

    async def get(self, contract_address: str, chain: Optional[str] = None,
                  now: Optional[datetime] = None,
                  timeout: Optional[float] = None) -> Optional[SecurityRecord]:
        """Fresh analysis for the contract, or None on miss or expiry."""
        key = self._key(contract_address, chain)
        stmt = select(SCSecurityCache).where(
            SCSecurityCache.contract_address == key.identifier,
            SCSecurityCache.chain == key.qualifier,
        )
        row = await self._first("get", str(key), stmt, timeout)

        if row is None:
            log_cache_operation(logger, "get", str(key), hit=False, kind=self.kind)
            return None
        if not self.policy.is_fresh(cached_at=row.cached_at, now=now):
            log_cache_operation(logger, "get", str(key), hit=False, kind=self.kind, stale=True)
            return None

        log_cache_operation(logger, "get", str(key), hit=True, kind=self.kind)
        return SecurityRecord(row.contract_address, row.chain, row.security_data, as_utc(row.cached_at))

    async def invalidate(self, contract_address: str, chain: Optional[str] = None,
                         timeout: Optional[float] = None) -> bool:
        key = self._key(contract_address, chain)
        deleted = await self._delete_where(
            "invalidate", str(key),
            SCSecurityCache.contract_address == key.identifier,
            SCSecurityCache.chain == key.qualifier,
            timeout=timeout,
        )
        log_cache_operation(logger, "invalidate", str(key), kind=self.kind, deleted=deleted)
        return deleted > 0

    async def purge_expired(self, now: Optional[datetime] = None,
                            timeout: Optional[float] = None) -> int:
        return await self._delete_where(
            "purge_expired", "*",
            SCSecurityCache.cached_at <= self.policy.cutoff(now),
            timeout=timeout,
        )
