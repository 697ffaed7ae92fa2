# antiresume/services/read_through.py

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

from antiresume.config import CACHE_TTL_SECONDS
from .cache import Cache, MISS
from .errors import CacheKeyCollisionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryDescriptor:
    """
    Static registration of a cacheable query.

    - key_fn(*args) -> cache key (must be unique per (query, args))
    - tag_fn(*args) -> tags known from the arguments alone
    - fetch_fn(repository, *args) -> value, or None when the entity is absent
    - value_tag_fn(value) -> extra tags known only after the fetch (e.g. the
      owner of a record looked up by username); not called for None
    """
    name: str
    key_fn: Callable[..., str]
    tag_fn: Callable[..., Iterable[str]]
    fetch_fn: Callable[..., Any]
    ttl_seconds: int = field(default=CACHE_TTL_SECONDS)
    value_tag_fn: Optional[Callable[[Any], Iterable[str]]] = None

    def tags_for(self, args: tuple, value: Any) -> set:
        tags = set(self.tag_fn(*args))
        if value is not None and self.value_tag_fn is not None:
            tags.update(self.value_tag_fn(value))
        return tags


class QueryRegistry:
    """Name -> descriptor map, filled at import time and immutable afterwards by convention."""

    def __init__(self) -> None:
        self._queries: Dict[str, QueryDescriptor] = {}

    def register(self, descriptor: QueryDescriptor) -> QueryDescriptor:
        if descriptor.name in self._queries:
            raise CacheKeyCollisionError(f"query {descriptor.name!r} is already registered")
        self._queries[descriptor.name] = descriptor
        return descriptor

    def __iter__(self) -> Iterator[QueryDescriptor]:
        return iter(self._queries.values())


class ReadThroughAccessor:
    """
    Serves registered queries from the cache, falling back to the repository.

    The cache is process-wide; the repository is request-scoped (it wraps the
    request's DB session), so an accessor is cheap to build per request.

    Rules:
      - hit: cached value returned as-is, no fetch
      - miss, found: value cached under its tags with the descriptor TTL
      - miss, not found (None): None cached the same way, so known-absent
        usernames do not hit the database on every request
      - miss, fetch raised: nothing cached, exception propagates unchanged
    """
    def __init__(self, cache: Cache, repository: Any):
        self._cache = cache
        self._repository = repository

    def query(self, descriptor: QueryDescriptor, *args: Any) -> Any:
        key = descriptor.key_fn(*args)
        cached = self._cache.get(key)
        if cached is not MISS:
            logger.debug("cache hit: %s", key)
            return cached

        logger.debug("cache miss: %s", key)
        # Any exception (including cancellation) leaves the cache untouched
        value = descriptor.fetch_fn(self._repository, *args)

        tags = descriptor.tags_for(args, value)
        self._cache.set(key, value, tags, descriptor.ttl_seconds)
        return value
