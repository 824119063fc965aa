"""Wallet address risk cache (24-hour TTL on cachedAt)."""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select

from constants import KIND_ADDRESS_RISK
from core.logging import get_logger, log_cache_operation
from models.cache import AddressRiskCache
from .keys import normalize_key
from .models import AddressRiskRecord
from .policy import CachePolicy, ExpiryMode, as_utc, utcnow
from .repository import CacheRepository
from .validation import validate_payload, validate_timestamp

logger = get_logger(__name__)


class AddressRiskCacheRepository(CacheRepository):
    """Keyed by (address, network); network defaults to the configured chain."""

    kind = KIND_ADDRESS_RISK
    model = AddressRiskCache

    def __init__(self, database, settings):
        super().__init__(database, settings)
        self.policy = CachePolicy(KIND_ADDRESS_RISK, ExpiryMode.FIXED_TTL, settings.address_risk_cache_ttl)

    def _key(self, address: str, network: Optional[str]):
        return normalize_key(address, network, self.settings.default_chain)

    async def put(self, address: str, risk_data: Dict[str, Any],
                  network: Optional[str] = None, cached_at: Optional[datetime] = None,
                  timeout: Optional[float] = None) -> AddressRiskRecord:
        key = self._key(address, network)
        validate_payload(risk_data, "riskData")
        cached_at = validate_timestamp(cached_at or utcnow(), "cachedAt")
        now = utcnow()

        stmt = self.database.upsert(
            self.table,
            {
                "address": key.identifier,
                "network": key.qualifier,
                "riskData": risk_data,
                "cachedAt": cached_at,
                "createdAt": now,
                "updatedAt": now,
            },
            conflict_columns=["address", "network"],
            preserve_columns=["createdAt"],
        )
        await self._write("put", str(key), stmt, timeout)
        log_cache_operation(logger, "put", str(key), kind=self.kind)

        return AddressRiskRecord(key.identifier, key.qualifier, risk_data, cached_at)

    async def get(self, address: str, network: Optional[str] = None,
                  now: Optional[datetime] = None,
                  timeout: Optional[float] = None) -> Optional[AddressRiskRecord]:
        key = self._key(address, network)
        stmt = select(AddressRiskCache).where(
            AddressRiskCache.address == key.identifier,
            AddressRiskCache.network == key.qualifier,
        )
        row = await self._first("get", str(key), stmt, timeout)

        if row is None or not self.policy.is_fresh(cached_at=row.cached_at, now=now):
            log_cache_operation(logger, "get", str(key), hit=False, kind=self.kind,
                                stale=row is not None)
            return None

        log_cache_operation(logger, "get", str(key), hit=True, kind=self.kind)
        return AddressRiskRecord(row.address, row.network, row.risk_data, as_utc(row.cached_at))

    async def invalidate(self, address: str, network: Optional[str] = None,
                         timeout: Optional[float] = None) -> bool:
        key = self._key(address, network)
        deleted = await self._delete_where(
            "invalidate", str(key),
            AddressRiskCache.address == key.identifier,
            AddressRiskCache.network == key.qualifier,
            timeout=timeout,
        )
        return deleted > 0

    async def purge_expired(self, now: Optional[datetime] = None,
                            timeout: Optional[float] = None) -> int:
        return await self._delete_where(
            "purge_expired", "*",
            AddressRiskCache.cached_at <= self.policy.cutoff(now),
            timeout=timeout,
        )
