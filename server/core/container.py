"""Dependency injection container for the application."""

from dependency_injector import containers, providers

from core.config import Settings
from core.database import Database
from core.cleanup import CleanupService
from services.cache import (
    AddressRiskCacheRepository,
    AuditCacheRepository,
    CacheRegistry,
    NewsDigestCacheRepository,
    SecurityCacheRepository,
    SentimentCacheRepository,
)


class Container(containers.DeclarativeContainer):
    """Application dependency injection container."""

    # Settings
    settings = providers.Singleton(
        Settings,
    )

    # Database
    database = providers.Singleton(
        Database,
        settings=settings
    )

    # Cache repositories, one per artifact kind
    security_cache = providers.Singleton(
        SecurityCacheRepository,
        database=database,
        settings=settings
    )

    address_risk_cache = providers.Singleton(
        AddressRiskCacheRepository,
        database=database,
        settings=settings
    )

    sentiment_cache = providers.Singleton(
        SentimentCacheRepository,
        database=database,
        settings=settings
    )

    news_cache = providers.Singleton(
        NewsDigestCacheRepository,
        database=database,
        settings=settings
    )

    audit_cache = providers.Singleton(
        AuditCacheRepository,
        database=database,
        settings=settings
    )

    cache_registry = providers.Singleton(
        CacheRegistry,
        security=security_cache,
        address_risk=address_risk_cache,
        sentiment=sentiment_cache,
        news=news_cache,
        audit=audit_cache
    )

    # Expiry sweep
    cleanup_service = providers.Singleton(
        CleanupService,
        registry=cache_registry,
        settings=settings
    )


# Global container instance
container = Container()
