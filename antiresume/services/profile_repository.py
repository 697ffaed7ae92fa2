# antiresume/services/profile_repository.py

import functools
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from antiresume.models.profile import Resume, UserProfile
from .errors import BackendError, UsernameTakenError

logger = logging.getLogger(__name__)

SOCIAL_FIELDS = ("linkedin", "twitter_handle", "ig_handle", "website")
WALLET_FIELDS = ("evm_wallet_address", "solana_wallet_address")
PROFILE_FIELDS = ("username", "email") + SOCIAL_FIELDS + WALLET_FIELDS


def _iso(v: Optional[datetime]) -> Optional[str]:
    # Ensure UTC and 'Z' suffix (SQLite hands back naive datetimes)
    if v is None:
        return None
    if v.tzinfo is None:
        v = v.replace(tzinfo=timezone.utc)
    v = v.astimezone(timezone.utc)
    return v.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _profile_json(p: UserProfile) -> Dict[str, Any]:
    return {
        "id": str(p.id),
        "clerk_user_id": p.clerk_user_id,
        "username": p.username,
        "email": p.email,
        **{f: getattr(p, f) for f in SOCIAL_FIELDS},
        **{f: getattr(p, f) for f in WALLET_FIELDS},
        "created_at": _iso(p.created_at),
        "updated_at": _iso(p.updated_at),
    }


def _resume_json(r: Resume) -> Dict[str, Any]:
    return {
        "id": str(r.id),
        "user_profile_id": str(r.user_profile_id),
        "tweets": list(r.tweets or []),
        "created_at": _iso(r.created_at),
        "updated_at": _iso(r.updated_at),
    }


def _backend_errors(fn):
    """Roll back and re-raise any SQLAlchemy failure as BackendError.

    Absence is reported by return value (None), never by exception, so the
    read-through cache can tell a missing row from a broken database.
    """
    @functools.wraps(fn)
    def wrapper(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("%s failed: %s", fn.__name__, exc)
            raise BackendError(f"{fn.__name__} failed") from exc
    return wrapper


class ProfileRepository:
    """Equality lookups and writes over user_profiles/resumes, returning JSON-ready dicts."""

    def __init__(self, db: Session):
        self.db = db

    # ---------- reads ----------

    def _profile_row(self, user_id: str) -> Optional[UserProfile]:
        stmt = select(UserProfile).where(UserProfile.clerk_user_id == user_id).limit(1)
        return self.db.execute(stmt).scalars().first()

    @_backend_errors
    def get_profile_by_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        row = self._profile_row(user_id)
        return _profile_json(row) if row is not None else None

    @_backend_errors
    def get_profile_id_by_user(self, user_id: str) -> Optional[str]:
        stmt = select(UserProfile.id).where(UserProfile.clerk_user_id == user_id).limit(1)
        profile_id = self.db.execute(stmt).scalar_one_or_none()
        return str(profile_id) if profile_id is not None else None

    @_backend_errors
    def get_resume_by_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        stmt = (
            select(Resume)
            .join(UserProfile, Resume.user_profile_id == UserProfile.id)
            .where(UserProfile.clerk_user_id == user_id)
            .limit(1)
        )
        row = self.db.execute(stmt).scalars().first()
        return _resume_json(row) if row is not None else None

    @_backend_errors
    def get_socials_by_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        row = self._profile_row(user_id)
        if row is None:
            return None
        return {f: getattr(row, f) for f in SOCIAL_FIELDS}

    @_backend_errors
    def get_wallets_by_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        row = self._profile_row(user_id)
        if row is None:
            return None
        return {f: getattr(row, f) for f in WALLET_FIELDS}

    @_backend_errors
    def get_public_profile(self, username: str) -> Optional[Dict[str, Any]]:
        """Profile + resume composite for the public page.

        ``clerk_user_id`` is kept for cache tagging; the API response model drops it.
        """
        stmt = select(UserProfile).where(UserProfile.username == username).limit(1)
        profile = self.db.execute(stmt).scalars().first()
        if profile is None:
            return None
        resume = self.db.execute(
            select(Resume).where(Resume.user_profile_id == profile.id).limit(1)
        ).scalars().first()
        return {
            "id": str(profile.id),
            "clerk_user_id": profile.clerk_user_id,
            "username": profile.username,
            **{f: getattr(profile, f) for f in SOCIAL_FIELDS},
            **{f: getattr(profile, f) for f in WALLET_FIELDS},
            "created_at": _iso(profile.created_at),
            "tweets": list(resume.tweets or []) if resume is not None else [],
            "resume_created_at": _iso(resume.created_at) if resume is not None else None,
        }

    @_backend_errors
    def username_taken(self, username: str, exclude_user_id: Optional[str] = None) -> bool:
        stmt = select(UserProfile.id).where(UserProfile.username == username)
        if exclude_user_id is not None:
            stmt = stmt.where(UserProfile.clerk_user_id != exclude_user_id)
        return self.db.execute(stmt.limit(1)).first() is not None

    # ---------- writes ----------

    def _commit_profile(self, profile: UserProfile) -> Dict[str, Any]:
        try:
            self.db.commit()
        except IntegrityError as exc:
            # Lost a race on the unique username
            self.db.rollback()
            raise UsernameTakenError(profile.username) from exc
        self.db.refresh(profile)
        return _profile_json(profile)

    @_backend_errors
    def create_profile(self, user_id: str, username: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        profile = UserProfile(clerk_user_id=user_id, username=username)
        for name, value in fields.items():
            if name in PROFILE_FIELDS:
                setattr(profile, name, value)
        self.db.add(profile)
        return self._commit_profile(profile)

    @_backend_errors
    def update_profile(self, user_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        profile = self._profile_row(user_id)
        if profile is None:
            return None
        for name, value in fields.items():
            if name in PROFILE_FIELDS:
                setattr(profile, name, value)
        profile.updated_at = datetime.now(timezone.utc)
        return self._commit_profile(profile)

    @_backend_errors
    def delete_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Delete the profile and its resume; returns the deleted profile or None."""
        profile = self._profile_row(user_id)
        if profile is None:
            return None
        snapshot = _profile_json(profile)
        self.db.execute(delete(Resume).where(Resume.user_profile_id == profile.id))
        self.db.delete(profile)
        self.db.commit()
        return snapshot

    def _resume_row(self, profile_id) -> Optional[Resume]:
        return self.db.execute(
            select(Resume).where(Resume.user_profile_id == profile_id).limit(1)
        ).scalars().first()

    @_backend_errors
    def resume_exists(self, profile_id: str) -> bool:
        return self._resume_row(_as_uuid(profile_id)) is not None

    @_backend_errors
    def create_resume(self, profile_id: str, tweets: List[Dict[str, Any]]) -> Dict[str, Any]:
        resume = Resume(user_profile_id=_as_uuid(profile_id), tweets=tweets)
        self.db.add(resume)
        self.db.commit()
        self.db.refresh(resume)
        return _resume_json(resume)

    @_backend_errors
    def update_resume(self, profile_id: str, tweets: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        resume = self._resume_row(_as_uuid(profile_id))
        if resume is None:
            return None
        resume.tweets = tweets
        resume.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(resume)
        return _resume_json(resume)

    @_backend_errors
    def delete_resume(self, profile_id: str) -> bool:
        result = self.db.execute(delete(Resume).where(Resume.user_profile_id == _as_uuid(profile_id)))
        self.db.commit()
        return (result.rowcount or 0) > 0


def _as_uuid(value) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))
