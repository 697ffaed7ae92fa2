# antiresume/services/profile_service.py

import logging
from typing import Any, Dict, List, Mapping, Optional

from .cache import Cache
from .errors import (
    InvalidInputError,
    ProfileNotFoundError,
    ResumeExistsError,
    ResumeNotFoundError,
    UsernameTakenError,
)
from .invalidation import CacheInvalidator
from .profile_queries import (
    PROFILE_BY_USER,
    PROFILE_ID_BY_USER,
    PUBLIC_PROFILE_BY_USERNAME,
    RESUME_BY_USER,
    SOCIALS_BY_USER,
    WALLETS_BY_USER,
)
from .profile_repository import SOCIAL_FIELDS, WALLET_FIELDS, ProfileRepository
from .read_through import ReadThroughAccessor
from .sanitize import normalize_username, sanitize_social_fields, sanitize_wallet_fields

logger = logging.getLogger(__name__)


def empty_social_fields() -> Dict[str, Optional[str]]:
    return {f: None for f in SOCIAL_FIELDS}


def empty_wallet_fields() -> Dict[str, Optional[str]]:
    return {f: None for f in WALLET_FIELDS}


class ProfileService:
    """
    Request-scoped facade over the profile store.

    Reads go through the read-through cache. Writes go straight to the
    repository and invalidate the affected tags before returning, so a read
    issued after a write completes in this process never sees the old value.
    """
    def __init__(self, repository: ProfileRepository, cache: Cache):
        self.repo = repository
        self.reader = ReadThroughAccessor(cache, repository)
        self.invalidator = CacheInvalidator(cache)

    # ---------- reads ----------

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self.reader.query(PROFILE_BY_USER, user_id)

    def get_profile_id(self, user_id: str) -> Optional[str]:
        return self.reader.query(PROFILE_ID_BY_USER, user_id)

    def get_resume(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self.reader.query(RESUME_BY_USER, user_id)

    def get_socials(self, user_id: str) -> Dict[str, Optional[str]]:
        return self.reader.query(SOCIALS_BY_USER, user_id) or empty_social_fields()

    def get_wallets(self, user_id: str) -> Dict[str, Optional[str]]:
        return self.reader.query(WALLETS_BY_USER, user_id) or empty_wallet_fields()

    def get_email(self, user_id: str) -> Optional[str]:
        profile = self.get_profile(user_id)
        return profile.get("email") if profile else None

    def get_public_profile(self, username: str) -> Optional[Dict[str, Any]]:
        return self.reader.query(PUBLIC_PROFILE_BY_USERNAME, username)

    # ---------- invalidation helpers ----------

    def _invalidate_user(self, user_id: str, *usernames: Optional[str]) -> None:
        self.invalidator.invalidate_profile(user_id)
        self.invalidator.invalidate_resume(user_id)
        self.invalidator.invalidate_socials(user_id)
        self.invalidator.invalidate_wallets(user_id)
        # Also clears cached "not found" entries for a freshly claimed name
        for username in {u for u in usernames if u}:
            self.invalidator.invalidate_public_profile(username)

    # ---------- profile / username ----------

    def claim_username(self, user_id: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Create the profile, or move an existing one to a new username."""
        username = normalize_username(payload.get("username"))
        if not username:
            raise InvalidInputError("Username is required")
        social_fields = sanitize_social_fields(payload)

        if self.repo.username_taken(username):
            raise UsernameTakenError(username)

        existing = self.repo.get_profile_by_user(user_id)
        if existing is not None:
            profile = self.repo.update_profile(user_id, {"username": username, **social_fields})
            logger.info("profile %s renamed %s -> %s", existing["id"], existing["username"], username)
        else:
            profile = self.repo.create_profile(user_id, username, social_fields)
            logger.info("profile %s created for %s", profile["id"], username)

        self._invalidate_user(user_id, username, existing["username"] if existing else None)
        return profile

    def change_username(self, user_id: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        username = normalize_username(payload.get("username"))
        if not username:
            raise InvalidInputError("Username is required")
        social_fields = sanitize_social_fields(payload)

        existing = self.repo.get_profile_by_user(user_id)
        if existing is None:
            raise ProfileNotFoundError(user_id)
        if existing["username"] == username:
            raise InvalidInputError("New username must be different from current username")
        if self.repo.username_taken(username, exclude_user_id=user_id):
            raise UsernameTakenError(username)

        profile = self.repo.update_profile(user_id, {"username": username, **social_fields})
        if profile is None:
            raise ProfileNotFoundError(user_id)
        self._invalidate_user(user_id, username, existing["username"])
        return profile

    def delete_profile(self, user_id: str) -> None:
        deleted = self.repo.delete_profile(user_id)
        if deleted is None:
            raise ProfileNotFoundError(user_id)
        self._invalidate_user(user_id, deleted["username"])
        logger.info("profile %s deleted", deleted["id"])

    # ---------- socials / wallets / email ----------

    def _update_profile_fields(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        profile = self.repo.update_profile(user_id, fields)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        # The profile record (and the public page built from it) embeds these fields
        self.invalidator.invalidate_profile(user_id)
        self.invalidator.invalidate_public_profile(profile["username"])
        return profile

    def update_socials(self, user_id: str, payload: Mapping[str, Any]) -> Dict[str, Optional[str]]:
        fields = sanitize_social_fields(payload)
        if not fields:
            raise InvalidInputError("No social fields provided")
        profile = self._update_profile_fields(user_id, fields)
        self.invalidator.invalidate_socials(user_id)
        return {f: profile[f] for f in SOCIAL_FIELDS}

    def update_wallets(self, user_id: str, payload: Mapping[str, Any]) -> Dict[str, Optional[str]]:
        fields = sanitize_wallet_fields(payload)
        if not fields:
            raise InvalidInputError("No wallet fields provided")
        profile = self._update_profile_fields(user_id, fields)
        self.invalidator.invalidate_wallets(user_id)
        return {f: profile[f] for f in WALLET_FIELDS}

    def update_email(self, user_id: str, email: Optional[str]) -> Optional[str]:
        profile = self._update_profile_fields(user_id, {"email": email or None})
        return profile["email"]

    # ---------- resume ----------

    def _require_profile_id(self, user_id: str) -> str:
        profile_id = self.get_profile_id(user_id)
        if not profile_id:
            raise ProfileNotFoundError(user_id)
        return profile_id

    def _invalidate_resume(self, user_id: str) -> None:
        self.invalidator.invalidate_resume(user_id)
        self.invalidator.invalidate_profile(user_id)

    def create_resume(self, user_id: str, tweets: List[Dict[str, Any]]) -> Dict[str, Any]:
        profile_id = self._require_profile_id(user_id)
        if self.repo.resume_exists(profile_id):
            raise ResumeExistsError(profile_id)
        resume = self.repo.create_resume(profile_id, tweets)
        self._invalidate_resume(user_id)
        return resume

    def update_resume(self, user_id: str, tweets: List[Dict[str, Any]]) -> Dict[str, Any]:
        profile_id = self._require_profile_id(user_id)
        resume = self.repo.update_resume(profile_id, tweets)
        if resume is None:
            raise ResumeNotFoundError(profile_id)
        self._invalidate_resume(user_id)
        return resume

    def delete_resume(self, user_id: str) -> None:
        profile_id = self._require_profile_id(user_id)
        self.repo.delete_resume(profile_id)
        self._invalidate_resume(user_id)
