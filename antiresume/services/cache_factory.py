import logging
from typing import Optional
from .cache import Cache
from .cache_backends import InProcessLRUCache, NoCache, RedisCache
from antiresume.config import CACHE_BACKEND, CACHE_CAPACITY, CACHE_KEY_PREFIX, REDIS_URL

logger = logging.getLogger(__name__)

_cache_singleton: Optional[Cache] = None


def build_cache(backend: str = CACHE_BACKEND) -> Cache:
    """
    Construct a cache for the given backend name:
      - "none"   -> no-op backend (always misses)
      - "memory" -> in-process LRU (fastest for single instance)
      - "redis"  -> shared cache across instances
    Unknown names fall back to the in-process LRU.
    """
    if backend == "none":
        return NoCache()
    if backend == "redis":
        return RedisCache.from_url(REDIS_URL, prefix=CACHE_KEY_PREFIX)
    if backend != "memory":
        logger.warning("Unknown CACHE_BACKEND %r; using in-process memory cache", backend)
    return InProcessLRUCache(capacity=CACHE_CAPACITY)


def get_cache() -> Cache:
    """
    Returns the process-wide cache instance, built once from configuration.

    With the memory backend every instance of a horizontally scaled deployment
    holds its own cache: a write on one instance may be invisible on another
    for up to the query TTL.
    """
    global _cache_singleton
    if _cache_singleton is None:
        _cache_singleton = build_cache()
        logger.info("Cache backend initialised: %s", type(_cache_singleton).__name__)
    return _cache_singleton


def set_cache(cache: Optional[Cache]) -> None:
    """Replace the process-wide cache (None rebuilds it lazily from configuration)."""
    global _cache_singleton
    _cache_singleton = cache
