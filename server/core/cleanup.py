"""Periodic expiry sweep for the cache tables.

The database has no native TTL eviction, so expired rows are removed here.
Rows may stay physically present for up to one ``cleanup_interval`` (plus
the duration of a sweep) after they expire; reads check freshness
themselves and never serve them.
"""
import asyncio
from datetime import datetime
from typing import Dict, Optional, TYPE_CHECKING

from core.logging import get_logger

if TYPE_CHECKING:
    from core.config import Settings
    from services.cache import CacheRegistry

logger = get_logger(__name__)


class CleanupService:
    """Background task deleting expired rows of every expiring cache kind."""

    def __init__(self, registry: "CacheRegistry", settings: "Settings"):
        self.registry = registry
        self.settings = settings
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self.last_run: Optional[Dict[str, int]] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the sweep background task."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._cleanup_loop())
        logger.info(
            "Cleanup service started",
            interval=self.settings.cleanup_interval,
            kinds=[repo.kind for repo in self.registry.expiring]
        )

    async def stop(self) -> None:
        """Stop the sweep gracefully."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Cleanup service stopped")

    async def _cleanup_loop(self) -> None:
        """Main loop - runs at the configured interval."""
        while self._running:
            try:
                await self.run_once()
            except Exception as e:
                logger.error("Cleanup failed", error=str(e))
            await asyncio.sleep(self.settings.cleanup_interval)

    async def run_once(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """Run one sweep and return rows deleted per kind."""
        results = await self.registry.purge_expired(now=now)
        self.last_run = results

        # Only log if something was cleaned up
        if sum(results.values()) > 0:
            logger.info("Cleanup completed", **results)
        return results
