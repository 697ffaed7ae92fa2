import logging
from .cache import Cache
from .cache_keys import CacheTags

logger = logging.getLogger(__name__)


class CacheInvalidator:
    """Named invalidation API for mutation handlers; they never touch keys or tags directly.

    Every call removes the matching entries before returning.
    """
    def __init__(self, cache: Cache):
        self._cache = cache

    def _drop(self, tag: str) -> None:
        removed = self._cache.invalidate_tag(tag)
        logger.debug("invalidated %s (%d entries)", tag, removed)

    def invalidate_profile(self, user_id: str) -> None:
        self._drop(CacheTags.profile(user_id))

    def invalidate_resume(self, user_id: str) -> None:
        self._drop(CacheTags.resume(user_id))

    def invalidate_socials(self, user_id: str) -> None:
        self._drop(CacheTags.socials(user_id))

    def invalidate_wallets(self, user_id: str) -> None:
        self._drop(CacheTags.wallets(user_id))

    def invalidate_public_profile(self, username: str) -> None:
        self._drop(CacheTags.public_profile(username))
