import json
import logging
from typing import Any, Callable, Iterable, Optional
import time

from .cache import Cache, MISS
from .lru_cache import LRUCacheImpl

logger = logging.getLogger(__name__)


class InProcessLRUCache(Cache):
    """In-process LRU cache backend."""
    def __init__(self, capacity: int, clock: Callable[[], float] = time.time):
        self._lru = LRUCacheImpl(capacity=capacity, clock=clock)

    def get(self, key: str) -> Any:
        return self._lru.get(key)

    def set(self, key: str, value: Any, tags: Iterable[str] = (), ttl_seconds: Optional[int] = None) -> None:
        self._lru.set(key, value, tags, ttl_seconds)

    def delete(self, key: str) -> None:
        self._lru.delete(key)

    def invalidate_tag(self, tag: str) -> int:
        return self._lru.invalidate_tag(tag)

    def purge_expired(self) -> int:
        return self._lru.purge_expired()

    def __len__(self) -> int:
        return len(self._lru)


class NoCache(Cache):
    """No-op cache used when caching is disabled."""
    def get(self, key: str): return MISS
    def set(self, key: str, value: Any, tags: Iterable[str] = (), ttl_seconds: int | None = None): pass
    def delete(self, key: str): pass
    def invalidate_tag(self, tag: str): return 0


class RedisCache(Cache):
    """
    Shared cache for multi-instance deployments.

    Layout (all under ``prefix``):
      - ``<prefix>:k:<key>``   JSON envelope {"v": value}, expires natively (PX)
      - ``<prefix>:t:<tag>``   set of keys carrying the tag
      - ``<prefix>:kt:<key>``  set of tags of the key, expires with the entry

    ``kt`` is authoritative. A ``t`` set may still list a key whose entry
    expired and was rewritten under other tags, so invalidation only drops keys
    whose ``kt`` set still holds the tag. Each ``t`` set expires no earlier than
    its longest-lived member; a ``t`` set that already has no expiry keeps none.

    Reads of the index happen under WATCH and writes in MULTI, so concurrent
    writers on the same key or tag retry instead of leaving a stale index.

    Redis errors are not caught here. An invalidation that cannot reach Redis
    must surface to the mutation handler instead of silently leaving stale data.
    """
    def __init__(self, client, prefix: str = "antiresume"):
        self._r = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "antiresume") -> "RedisCache":
        import redis
        return cls(redis.Redis.from_url(url, decode_responses=True), prefix=prefix)

    def _k(self, key: str) -> str:
        return f"{self._prefix}:k:{key}"

    def _t(self, tag: str) -> str:
        return f"{self._prefix}:t:{tag}"

    def _kt(self, key: str) -> str:
        return f"{self._prefix}:kt:{key}"

    def get(self, key: str) -> Any:
        raw = self._r.get(self._k(key))
        if raw is None:
            return MISS
        try:
            return json.loads(raw)["v"]
        except (ValueError, KeyError, TypeError):
            logger.warning("redis_cache: dropping undecodable entry %s", key)
            self.delete(key)
            return MISS

    def set(self, key: str, value: Any, tags: Iterable[str] = (), ttl_seconds: Optional[int] = None) -> None:
        payload = json.dumps({"v": value}, separators=(",", ":"), ensure_ascii=False)
        new_tags = set(tags)
        ttl_ms = int(ttl_seconds * 1000) if ttl_seconds else None
        kt = self._kt(key)

        def write(pipe) -> None:
            old_tags = set(pipe.smembers(kt))
            # -2: no tag set yet, -1: tag set without expiry
            tag_ttls = {tag: pipe.pttl(self._t(tag)) for tag in new_tags}
            pipe.multi()
            for tag in old_tags - new_tags:
                pipe.srem(self._t(tag), key)
            if ttl_ms:
                pipe.set(self._k(key), payload, px=ttl_ms)
            else:
                pipe.set(self._k(key), payload)
            pipe.delete(kt)
            if not new_tags:
                return
            pipe.sadd(kt, *new_tags)
            if ttl_ms:
                pipe.pexpire(kt, ttl_ms)
            for tag in new_tags:
                pipe.sadd(self._t(tag), key)
                if ttl_ms is None:
                    pipe.persist(self._t(tag))
                elif tag_ttls[tag] != -1:
                    pipe.pexpire(self._t(tag), max(ttl_ms, tag_ttls[tag]))

        self._r.transaction(write, kt, *(self._t(tag) for tag in new_tags))

    def delete(self, key: str) -> None:
        kt = self._kt(key)

        def drop(pipe) -> None:
            tags = set(pipe.smembers(kt))
            pipe.multi()
            for tag in tags:
                pipe.srem(self._t(tag), key)
            pipe.delete(self._k(key), kt)

        self._r.transaction(drop, kt)

    def invalidate_tag(self, tag: str) -> int:
        t = self._t(tag)

        def drop(pipe) -> int:
            members = list(pipe.smembers(t))
            if members:
                pipe.watch(*(self._kt(key) for key in members))
            live = [key for key in members if pipe.sismember(self._kt(key), tag)]
            pipe.multi()
            for key in live:
                pipe.delete(self._k(key), self._kt(key))
            pipe.delete(t)
            return len(live)

        return self._r.transaction(drop, t, value_from_callable=True)
