# models/profile.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from antiresume.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserProfile(Base):
    __tablename__ = "user_profiles"

    # Primary key for the profile, generated on creation
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # User id issued by the identity provider (one profile per user)
    clerk_user_id = Column(String(255), nullable=False, unique=True, index=True)

    # Public handle; the profile page lives at /<username>
    username = Column(String(64), nullable=False, unique=True, index=True)

    email = Column(String(320), nullable=True)

    # Social links (URLs for linkedin/website, bare handles for twitter/ig)
    linkedin = Column(String(512), nullable=True)
    twitter_handle = Column(String(128), nullable=True)
    ig_handle = Column(String(128), nullable=True)
    website = Column(String(512), nullable=True)

    # Wallet addresses
    evm_wallet_address = Column(String(128), nullable=True)
    solana_wallet_address = Column(String(128), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # One resume per profile
    user_profile_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    # Ordered list of post embeds: [{"tweet_link": str, "notes": str | None}, ...]
    tweets = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
