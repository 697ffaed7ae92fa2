# antiresume/schemas/profile.py

from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Optional, List


class TweetItem(BaseModel):
    """One post embed on the resume: the post URL plus an optional personal note."""
    tweet_link: str = Field(..., description="URL of the tweet/post to embed.")
    notes: Optional[str] = Field(None, description="Personal note shown under the embed.")

    @field_validator("tweet_link")
    @classmethod
    def _strip_link(cls, v: str) -> str:
        return v.strip()


class ResumePayload(BaseModel):
    # Order is the display order chosen by the user (drag-and-drop on the client)
    tweets: List[TweetItem]


class EmailUpdate(BaseModel):
    email: Optional[EmailStr] = Field(None, description="Contact email; blank clears it.")

    @field_validator("email", mode="before")
    @classmethod
    def _blank_is_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class SocialLinks(BaseModel):
    linkedin: Optional[str] = None
    twitter_handle: Optional[str] = None
    ig_handle: Optional[str] = None
    website: Optional[str] = None


class WalletAddresses(BaseModel):
    evm_wallet_address: Optional[str] = None
    solana_wallet_address: Optional[str] = None


class ProfileRead(SocialLinks, WalletAddresses):
    """Owner's view of the profile (dashboard)."""
    id: str
    username: str
    email: Optional[str] = None
    created_at: str
    updated_at: str


class ResumeRead(BaseModel):
    id: str
    user_profile_id: str
    tweets: List[TweetItem]
    created_at: str
    updated_at: str


class PublicProfileRead(SocialLinks, WalletAddresses):
    """
    Public page payload.
    Notes:
    - Built from the cached profile + resume composite.
    - The identity-provider user id carried in the cache entry is not part of
      this model and is therefore never serialized.
    """
    id: str
    username: str
    created_at: str
    tweets: List[TweetItem] = []
    resume_created_at: Optional[str] = None
