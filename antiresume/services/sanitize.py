import re
from typing import Any, Dict, Mapping, Optional

from .profile_repository import SOCIAL_FIELDS, WALLET_FIELDS

_PROTOCOL_RE = re.compile(r"^https?://", re.IGNORECASE)
_TWEET_ID_RE = re.compile(r"(?:twitter\.com|x\.com)/\w+/status/(\d+)")

# Social fields holding URLs rather than bare handles
URL_SOCIAL_FIELDS = ("website", "linkedin")


def ensure_https_protocol(url: str) -> str:
    trimmed = url.strip()
    if not trimmed:
        return trimmed
    if not _PROTOCOL_RE.match(trimmed):
        return f"https://{trimmed}"
    return trimmed


def normalize_username(raw: Any) -> Optional[str]:
    """Trim and drop a leading '@'. Returns None when nothing is left."""
    if not isinstance(raw, str):
        return None
    trimmed = raw.strip()
    if trimmed.startswith("@"):
        trimmed = trimmed[1:].strip()
    return trimmed or None


def _clean(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def sanitize_social_fields(payload: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    """Only keys present in the payload are returned; blanks and non-strings become None."""
    result: Dict[str, Optional[str]] = {}
    for key in SOCIAL_FIELDS:
        if key not in payload:
            continue
        value = _clean(payload[key])
        if value is not None and key in URL_SOCIAL_FIELDS:
            value = ensure_https_protocol(value)
        result[key] = value
    return result


def sanitize_wallet_fields(payload: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    return {key: _clean(payload[key]) for key in WALLET_FIELDS if key in payload}


def extract_tweet_id(url: str) -> Optional[str]:
    if not url:
        return None
    match = _TWEET_ID_RE.search(url)
    return match.group(1) if match else None
