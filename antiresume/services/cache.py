from abc import ABC, abstractmethod
from typing import Any, Iterable


class _Miss:
    """Sentinel type for a cache miss; distinct from a cached ``None``."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISS"


MISS = _Miss()


class Cache(ABC):
    """Tagged cache interface to enable swapping backends (memory, Redis, none) without changing callers.

    ``None`` is a legal value ("entity not found"); absence and expiry are
    reported as ``MISS``.
    """

    @abstractmethod
    def get(self, key: str) -> Any:
        ...

    @abstractmethod
    def set(self, key: str, value: Any, tags: Iterable[str] = (), ttl_seconds: int | None = None) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def invalidate_tag(self, tag: str) -> int:
        """Remove every entry carrying ``tag``; returns the number of keys removed."""
        ...

    def invalidate_tags(self, tags: Iterable[str]) -> int:
        removed = 0
        for tag in set(tags):
            removed += self.invalidate_tag(tag)
        return removed

    def purge_expired(self) -> int:
        """Drop logically expired entries. Backends with native expiry return 0."""
        return 0
