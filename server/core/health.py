"""Health check utilities for the /health endpoint."""
import time
from typing import Dict, Any, TYPE_CHECKING

from core.logging import get_logger

if TYPE_CHECKING:
    from core.cleanup import CleanupService
    from core.config import Settings
    from core.database import Database
    from services.cache import CacheRegistry

logger = get_logger(__name__)

# Module-level startup time tracking
_startup_time: float = 0.0


def set_startup_time() -> None:
    """Record the application startup time. Call once during lifespan startup."""
    global _startup_time
    _startup_time = time.time()


def get_uptime() -> float:
    """Get uptime in seconds since startup."""
    return time.time() - _startup_time if _startup_time else 0.0


async def get_health_status(
    database: "Database",
    registry: "CacheRegistry",
    cleanup: "CleanupService",
    settings: "Settings"
) -> Dict[str, Any]:
    """Get comprehensive health status for /health endpoint.

    Returns:
        Dict containing status, uptime, per-kind row counts and sweep state.
    """
    db_healthy = await database.ping()

    counts: Dict[str, int] = {}
    if db_healthy:
        try:
            counts = await registry.counts()
        except Exception as e:
            logger.warning("Failed to count cache rows", error=str(e))
            db_healthy = False

    return {
        "status": "healthy" if db_healthy else "degraded",
        "uptime_seconds": round(get_uptime(), 1),
        "checks": {
            "database": db_healthy,
        },
        "cache": counts,
        "cleanup": {
            "enabled": settings.cleanup_enabled,
            "running": cleanup.running,
            "interval_seconds": settings.cleanup_interval,
            "last_run": cleanup.last_run,
        },
    }
