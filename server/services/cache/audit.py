"""Smart contract audit report cache (per-record expiresAt, 30 days by default)."""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select, update

from constants import KIND_AUDIT
from core.logging import get_logger, log_cache_operation
from models.cache import ChainGPTAuditCache
from .keys import normalize_identifier
from .models import AuditRecord, AuditReport
from .policy import CachePolicy, ExpiryMode, as_utc, utcnow
from .repository import CacheRepository
from .validation import validate_audit_report, validate_chain_id, validate_timestamp

logger = get_logger(__name__)


class AuditCacheRepository(CacheRepository):
    """Keyed by (contractAddress, chainId).

    Reads do not count hits; callers that serve a cached report call
    ``record_access`` explicitly.
    """

    kind = KIND_AUDIT
    model = ChainGPTAuditCache

    def __init__(self, database, settings):
        super().__init__(database, settings)
        self.policy = CachePolicy(KIND_AUDIT, ExpiryMode.RECORD_EXPIRY)
        self.default_ttl = timedelta(seconds=settings.audit_cache_ttl)

    @staticmethod
    def _key(contract_address: str, chain_id: int):
        return normalize_identifier(contract_address, field="contractAddress"), validate_chain_id(chain_id)

    async def put(self, contract_address: str, chain_id: int, report: AuditReport,
                  expires_at: Optional[datetime] = None,
                  timeout: Optional[float] = None) -> AuditRecord:
        """Insert or replace a report; the hit counter starts again at zero."""
        address, chain_id = self._key(contract_address, chain_id)
        validate_audit_report(report)
        audited_at = as_utc(report.audited_at)
        expires_at = validate_timestamp(expires_at or audited_at + self.default_ttl, "expiresAt")
        now = utcnow()
        cache_key = f"{address}:{chain_id}"

        stmt = self.database.upsert(
            self.table,
            {
                "contractAddress": address,
                "chainId": chain_id,
                "contractName": report.contract_name,
                "auditReport": report.audit_report,
                "summary": report.summary,
                "vulnerabilities": report.vulnerabilities,
                "compilerVersion": report.compiler_version,
                "auditedAt": audited_at,
                "expiresAt": expires_at,
                "hitCount": 0,
                "lastAccessedAt": None,
                "createdAt": now,
                "updatedAt": now,
            },
            conflict_columns=["contractAddress", "chainId"],
            preserve_columns=["createdAt"],
        )
        await self._write("put", cache_key, stmt, timeout)
        log_cache_operation(logger, "put", cache_key, kind=self.kind)

        return AuditRecord(address, chain_id, report, expires_at)

    async def get(self, contract_address: str, chain_id: int,
                  now: Optional[datetime] = None,
                  timeout: Optional[float] = None) -> Optional[AuditRecord]:
        address, chain_id = self._key(contract_address, chain_id)
        cache_key = f"{address}:{chain_id}"
        stmt = select(ChainGPTAuditCache).where(
            ChainGPTAuditCache.contract_address == address,
            ChainGPTAuditCache.chain_id == chain_id,
        )
        row = await self._first("get", cache_key, stmt, timeout)

        if row is None or not self.policy.is_fresh(expires_at=row.expires_at, now=now):
            log_cache_operation(logger, "get", cache_key, hit=False, kind=self.kind,
                                stale=row is not None)
            return None

        log_cache_operation(logger, "get", cache_key, hit=True, kind=self.kind)
        report = AuditReport(
            audit_report=row.audit_report,
            audited_at=as_utc(row.audited_at),
            contract_name=row.contract_name,
            summary=row.summary,
            vulnerabilities=row.vulnerabilities,
            compiler_version=row.compiler_version,
        )
        return AuditRecord(
            contract_address=row.contract_address,
            chain_id=row.chain_id,
            report=report,
            expires_at=as_utc(row.expires_at),
            hit_count=row.hit_count,
            last_accessed_at=as_utc(row.last_accessed_at) if row.last_accessed_at else None,
        )

    async def record_access(self, contract_address: str, chain_id: int,
                            accessed_at: Optional[datetime] = None,
                            timeout: Optional[float] = None) -> bool:
        """Increment hitCount and stamp lastAccessedAt in one statement."""
        address, chain_id = self._key(contract_address, chain_id)
        accessed_at = validate_timestamp(accessed_at or utcnow(), "lastAccessedAt")
        cache_key = f"{address}:{chain_id}"

        stmt = (
            update(ChainGPTAuditCache)
            .where(
                ChainGPTAuditCache.contract_address == address,
                ChainGPTAuditCache.chain_id == chain_id,
            )
            .values({
                ChainGPTAuditCache.hit_count: ChainGPTAuditCache.hit_count + 1,
                ChainGPTAuditCache.last_accessed_at: accessed_at,
            })
            .execution_options(synchronize_session=False)
        )

        async def work(session) -> int:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount or 0

        updated = await self._run("record_access", cache_key, work, timeout)
        return updated > 0

    async def invalidate(self, contract_address: str, chain_id: int,
                         timeout: Optional[float] = None) -> bool:
        address, chain_id = self._key(contract_address, chain_id)
        deleted = await self._delete_where(
            "invalidate", f"{address}:{chain_id}",
            ChainGPTAuditCache.contract_address == address,
            ChainGPTAuditCache.chain_id == chain_id,
            timeout=timeout,
        )
        return deleted > 0

    async def purge_expired(self, now: Optional[datetime] = None,
                            timeout: Optional[float] = None) -> int:
        return await self._delete_where(
            "purge_expired", "*",
            ChainGPTAuditCache.expires_at <= as_utc(self._now(now)),
            timeout=timeout,
        )
