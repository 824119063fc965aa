"""
Artifact cache service.

Hosts the cache repositories, the expiry sweep and a small admin surface.
"""

from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.container import container
from core.health import get_health_status, set_startup_time
from core.logging import configure_logging, get_logger
from routers import cache

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    settings = container.settings()
    configure_logging(settings)
    set_startup_time()
    logger.info("Starting artifact cache service")

    await container.database().startup()

    cleanup = container.cleanup_service()
    if settings.cleanup_enabled:
        await cleanup.start()

    logger.info("Services started successfully")
    yield

    await cleanup.stop()
    await container.database().shutdown()
    logger.info("Services shutdown complete")


app = FastAPI(
    title="Artifact Cache Service",
    version="1.0.0",
    description="TTL cache for contract security, address risk, sentiment and news artifacts",
    lifespan=lifespan,
)

app.include_router(cache.router)


@app.get("/health")
async def health_check():
    """Detailed health check."""
    status = await get_health_status(
        container.database(),
        container.cache_registry(),
        container.cleanup_service(),
        container.settings(),
    )
    status["timestamp"] = datetime.now().isoformat()
    return status


if __name__ == "__main__":
    import uvicorn
    settings = container.settings()
    logger.info("Starting artifact cache service",
                host=settings.host, port=settings.port, debug=settings.debug)
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
