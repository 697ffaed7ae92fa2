# antiresume/sweeper.py

import asyncio
import logging
from contextlib import suppress
from typing import Callable, Optional

from antiresume.config import CACHE_SWEEP_INTERVAL_SECONDS
from antiresume.services.cache import Cache
from antiresume.services.cache_factory import get_cache

logger = logging.getLogger(__name__)


class CacheSweeper:
    """Periodic background worker that drops expired cache entries.

    Memory hygiene only: expired entries already read as misses, the sweep
    just releases them without waiting for a read or an LRU eviction.
    """

    def __init__(
        self,
        interval_seconds: int | None = None,
        cache_provider: Callable[[], Cache] = get_cache,
    ) -> None:
        self.interval_seconds = CACHE_SWEEP_INTERVAL_SECONDS if interval_seconds is None else interval_seconds
        self._cache_provider = cache_provider
        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()

    @property
    def enabled(self) -> bool:
        return self.interval_seconds > 0

    async def start(self) -> None:
        """Start the background worker task."""
        if not self.enabled:
            logger.info("CacheSweeper disabled (interval=%s)", self.interval_seconds)
            return
        if self._task is not None:
            return  # Already started
        self._stop = asyncio.Event()
        logger.info("Starting CacheSweeper worker (interval=%s sec)...", self.interval_seconds)
        self._task = asyncio.create_task(self._run(), name="cache-sweeper")

    async def stop(self) -> None:
        """Signal the worker to stop and wait for it to finish."""
        self._stop.set()
        if self._task is None:
            return
        logger.info("Stopping CacheSweeper worker...")
        try:
            await asyncio.wait_for(self._task, timeout=5)
        except asyncio.TimeoutError:
            logger.warning("Cache sweeper did not stop in time; cancelling...")
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
        finally:
            self._task = None
        logger.info("CacheSweeper worker stopped.")

    async def _run(self) -> None:
        """Main loop: sweep periodically until stop is requested."""
        try:
            while not self._stop.is_set():
                try:
                    self.sweep_once()
                except Exception:
                    logger.exception("Cache sweep failed with an exception.")
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
                except asyncio.TimeoutError:
                    pass
        finally:
            logger.info("CacheSweeper loop exiting.")

    def sweep_once(self) -> int:
        removed = self._cache_provider().purge_expired()
        if removed:
            logger.info("Cache sweep removed %d expired entries", removed)
        return removed
