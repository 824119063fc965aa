"""SQLModel tables for the artifact caches.

Column names follow the persisted document layout (camelCase) so rows stay
interchangeable with the records written by other consumers of the store.
Python attributes use snake_case.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from sqlmodel import SQLModel, Field, Column, DateTime, JSON
from sqlalchemy import Boolean, Float, Integer, String, Text, UniqueConstraint

from constants import (
    SECURITY_TABLE,
    ADDRESS_RISK_TABLE,
    SENTIMENT_TABLE,
    NEWS_DIGEST_TABLE,
    AUDIT_TABLE,
    DEFAULT_CHAIN,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SCSecurityCache(SQLModel, table=True):
    """Smart contract security analysis, expires 7 days after cachedAt."""

    __tablename__ = SECURITY_TABLE
    __table_args__ = (
        UniqueConstraint("contractAddress", "chain", name="uq_sc_security_contract_chain"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    contract_address: str = Field(sa_column=Column("contractAddress", String(128), nullable=False))
    chain: str = Field(default=DEFAULT_CHAIN, sa_column=Column("chain", String(32), nullable=False))
    security_data: Dict[str, Any] = Field(sa_column=Column("securityData", JSON, nullable=False))
    cached_at: datetime = Field(
        sa_column=Column("cachedAt", DateTime(timezone=True), nullable=False, index=True)
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column("createdAt", DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column("updatedAt", DateTime(timezone=True))
    )


class AddressRiskCache(SQLModel, table=True):
    """Wallet address risk assessment, expires 24 hours after cachedAt."""

    __tablename__ = ADDRESS_RISK_TABLE
    __table_args__ = (
        UniqueConstraint("address", "network", name="uq_address_risk_address_network"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    address: str = Field(sa_column=Column("address", String(128), nullable=False))
    network: str = Field(default=DEFAULT_CHAIN, sa_column=Column("network", String(32), nullable=False))
    risk_data: Dict[str, Any] = Field(sa_column=Column("riskData", JSON, nullable=False))
    cached_at: datetime = Field(
        sa_column=Column("cachedAt", DateTime(timezone=True), nullable=False, index=True)
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column("createdAt", DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column("updatedAt", DateTime(timezone=True))
    )


class SentimentCache(SQLModel, table=True):
    """Market sentiment snapshot. Key format: sentiment_{timeframe}[_{lang|date}].

    The key index is not unique; each record carries its own expiresAt.
    """

    __tablename__ = SENTIMENT_TABLE

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(sa_column=Column("key", String(128), nullable=False, index=True))
    timeframe: str = Field(sa_column=Column("timeframe", String(8), nullable=False))
    overall_score: float = Field(sa_column=Column("overallScore", Float, nullable=False))
    overall_label: str = Field(sa_column=Column("overallLabel", String(32), nullable=False))
    confidence: float = Field(sa_column=Column("confidence", Float, nullable=False))
    news_data: Dict[str, Any] = Field(sa_column=Column("newsData", JSON, nullable=False))
    social_data: Dict[str, Any] = Field(sa_column=Column("socialData", JSON, nullable=False))
    market_data: Dict[str, Any] = Field(sa_column=Column("marketData", JSON, nullable=False))
    insights: List[str] = Field(default_factory=list, sa_column=Column("insights", JSON, nullable=False))
    data_timestamp: datetime = Field(
        sa_column=Column("dataTimestamp", DateTime(timezone=True), nullable=False)
    )
    expires_at: datetime = Field(
        sa_column=Column("expiresAt", DateTime(timezone=True), nullable=False, index=True)
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column("createdAt", DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column("updatedAt", DateTime(timezone=True))
    )


class NewsCache(SQLModel, table=True):
    """Daily news digest. No automatic expiry; cleared wholesale."""

    __tablename__ = NEWS_DIGEST_TABLE

    id: Optional[int] = Field(default=None, primary_key=True)
    date: str = Field(sa_column=Column("date", String(10), nullable=False, unique=True))
    summary: str = Field(sa_column=Column("summary", Text, nullable=False))
    topics: List[str] = Field(default_factory=list, sa_column=Column("topics", JSON, nullable=False))
    raw_data: Optional[str] = Field(default=None, sa_column=Column("rawData", Text, nullable=True))
    is_processed: bool = Field(default=False, sa_column=Column("isProcessed", Boolean, nullable=False))
    cached_at: datetime = Field(
        sa_column=Column("cachedAt", DateTime(timezone=True), nullable=False)
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column("createdAt", DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column("updatedAt", DateTime(timezone=True))
    )


class ChainGPTAuditCache(SQLModel, table=True):
    """Smart contract audit report, expires at its own expiresAt (30 days by default)."""

    __tablename__ = AUDIT_TABLE
    __table_args__ = (
        UniqueConstraint("contractAddress", "chainId", name="uq_audit_contract_chain_id"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    contract_address: str = Field(
        sa_column=Column("contractAddress", String(128), nullable=False, index=True)
    )
    chain_id: int = Field(sa_column=Column("chainId", Integer, nullable=False, index=True))
    contract_name: Optional[str] = Field(
        default=None, sa_column=Column("contractName", String(255), nullable=True)
    )
    audit_report: str = Field(sa_column=Column("auditReport", Text, nullable=False))
    summary: Optional[str] = Field(default=None, sa_column=Column("summary", Text, nullable=True))
    vulnerabilities: Optional[Dict[str, Any]] = Field(
        default=None, sa_column=Column("vulnerabilities", JSON, nullable=True)
    )
    compiler_version: Optional[str] = Field(
        default=None, sa_column=Column("compilerVersion", String(64), nullable=True)
    )
    audited_at: datetime = Field(
        sa_column=Column("auditedAt", DateTime(timezone=True), nullable=False)
    )
    expires_at: datetime = Field(
        sa_column=Column("expiresAt", DateTime(timezone=True), nullable=False, index=True)
    )
    hit_count: int = Field(default=0, sa_column=Column("hitCount", Integer, nullable=False, default=0))
    last_accessed_at: Optional[datetime] = Field(
        default=None, sa_column=Column("lastAccessedAt", DateTime(timezone=True), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column("createdAt", DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column("updatedAt", DateTime(timezone=True))
    )
