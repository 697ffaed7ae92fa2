"""Cache key and tag derivation.

Keys have the form ``<query-name>:<arg>:<arg>...``. Arguments are
percent-encoded, so a ``:`` inside an identifier can never shift a boundary
and two distinct (query, arguments) pairs never map to the same key.
Identifiers are opaque: no trimming, no case folding.

Examples:
    profile-by-user:user_2abc
    public-profile-by-username:alice
    public-profile-by-username:a%3Ab
"""

from typing import Any
from urllib.parse import quote

SEPARATOR = ":"


def _encode(part: Any) -> str:
    return quote(str(part), safe="")


def build_key(query_name: str, *args: Any) -> str:
    if not query_name or SEPARATOR in query_name:
        raise ValueError(f"invalid query name: {query_name!r}")
    return SEPARATOR.join([query_name, *(_encode(a) for a in args)])


def _tag(kind: str, identifier: str) -> str:
    return f"{kind}{SEPARATOR}{_encode(identifier)}"


class CacheTags:
    """Invalidation scopes, one per entity kind."""

    @staticmethod
    def profile(user_id: str) -> str:
        return _tag("profile", user_id)

    @staticmethod
    def resume(user_id: str) -> str:
        return _tag("resume", user_id)

    @staticmethod
    def socials(user_id: str) -> str:
        return _tag("socials", user_id)

    @staticmethod
    def wallets(user_id: str) -> str:
        return _tag("wallets", user_id)

    @staticmethod
    def public_profile(username: str) -> str:
        return _tag("publicProfile", username)
