from collections import OrderedDict
from copy import deepcopy
from threading import RLock
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional, Set, Tuple
import time

from .cache import MISS

# (expires_at, value, tags); expires_at == 0.0 means no expiration
_Entry = Tuple[float, Any, FrozenSet[str]]


class LRUCacheImpl:
    """
    Thread-safe LRU cache with per-entry TTL and tag-indexed invalidation.
    Values are stored as deep copies to avoid accidental mutation by callers.

    A reverse index (tag -> keys) keeps invalidation proportional to the number
    of entries carrying the tag. Reads never extend an entry's lifetime; they
    only refresh its LRU position.
    """
    def __init__(self, capacity: int = 10_000, clock: Callable[[], float] = time.time):
        self.capacity = max(1, capacity)
        self._clock = clock
        self._data: "OrderedDict[str, _Entry]" = OrderedDict()
        self._tag_index: Dict[str, Set[str]] = {}
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def get(self, key: str) -> Any:
        now = self._clock()
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return MISS
            expires_at, value, _tags = item
            if expires_at and now >= expires_at:
                # Expired: evict and miss
                self._remove(key)
                return MISS
            # Move to MRU
            self._data.move_to_end(key)
            return deepcopy(value)

    def set(self, key: str, value: Any, tags: Iterable[str] = (), ttl_seconds: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds else 0.0
        tag_set = frozenset(tags)
        with self._lock:
            if key in self._data:
                # Replace, not merge: old tags must not keep pointing at this key
                self._remove(key)
            elif len(self._data) >= self.capacity:
                oldest = next(iter(self._data))  # Evict LRU
                self._remove(oldest)
            self._data[key] = (expires_at, deepcopy(value), tag_set)
            for tag in tag_set:
                self._tag_index.setdefault(tag, set()).add(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._remove(key)

    def invalidate_tag(self, tag: str) -> int:
        with self._lock:
            keys = self._tag_index.pop(tag, set())
            for key in list(keys):
                self._remove(key)
            return len(keys)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [k for k, (exp, _v, _t) in self._data.items() if exp and now >= exp]
            for key in expired:
                self._remove(key)
            return len(expired)

    def _remove(self, key: str) -> None:
        # Caller holds the lock
        item = self._data.pop(key, None)
        if item is None:
            return
        for tag in item[2]:
            keys = self._tag_index.get(tag)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._tag_index[tag]
