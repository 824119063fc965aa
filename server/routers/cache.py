"""Cache administration routes."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from core.container import container
from core.logging import get_logger
from services.cache import CacheRegistry, PersistenceUnavailable

logger = get_logger(__name__)
router = APIRouter(prefix="/api/cache", tags=["cache"])


def _unavailable(error: PersistenceUnavailable) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"success": False, "error": str(error)}
    )


@router.post("/news/clear")
async def clear_news_cache(
    registry: CacheRegistry = Depends(lambda: container.cache_registry())
):
    """Delete every cached news digest so the next summary fetches fresh news."""
    try:
        deleted = await registry.news.clear_all()
    except PersistenceUnavailable as e:
        logger.error("Failed to clear news cache", error=str(e))
        return _unavailable(e)
    return {"success": True, "deleted": deleted}


@router.get("/stats")
async def cache_stats(
    registry: CacheRegistry = Depends(lambda: container.cache_registry())
):
    """Rows physically present per cache kind (expired-but-unswept included)."""
    try:
        counts = await registry.counts()
    except PersistenceUnavailable as e:
        logger.error("Failed to read cache stats", error=str(e))
        return _unavailable(e)
    return {"success": True, "counts": counts}
