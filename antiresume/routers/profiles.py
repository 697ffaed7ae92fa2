# antiresume/routers/profiles.py

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from antiresume.database import get_db
from antiresume.schemas.profile import EmailUpdate, ProfileRead, PublicProfileRead
from antiresume.services.cache_factory import get_cache
from antiresume.services.profile_repository import ProfileRepository
from antiresume.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["profiles"])


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """
    Identity comes from the fronting auth gateway, which forwards the
    identity provider's user id in X-User-Id. No header -> 401.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    return ProfileService(ProfileRepository(db), get_cache())


async def _json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid JSON format")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON format")
    return body


def _profile_out(profile: Optional[dict]) -> Optional[dict]:
    return ProfileRead(**profile).model_dump() if profile else None


# ---------- username / profile ----------

@router.get("/username")
def get_username(user_id: str = Depends(get_current_user_id), svc: ProfileService = Depends(get_profile_service)):
    """
    GET /api/username
    Returns the caller's profile, or {"profile": null} before a username is claimed.
    """
    return {"profile": _profile_out(svc.get_profile(user_id))}


@router.post("/username")
async def claim_username(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    svc: ProfileService = Depends(get_profile_service),
):
    """
    POST /api/username
    Claims a username (leading '@' stripped) and optionally sets social links.
    Creates the profile on first call, renames it afterwards.

    Status codes:
      - 200: claimed
      - 400: username missing/blank
      - 409: username already taken
    """
    payload = await _json_body(request)
    profile = svc.claim_username(user_id, payload)
    return {"success": True, "profile": _profile_out(profile)}


@router.put("/username")
async def change_username(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    svc: ProfileService = Depends(get_profile_service),
):
    """
    PUT /api/username
    Renames an existing profile. Old and new public pages are invalidated.

    Status codes:
      - 200: renamed
      - 400: blank, or same as the current username
      - 404: no profile yet
      - 409: taken by another user
    """
    payload = await _json_body(request)
    profile = svc.change_username(user_id, payload)
    return {"success": True, "profile": _profile_out(profile), "message": "Profile updated successfully"}


@router.delete("/username")
def delete_profile(user_id: str = Depends(get_current_user_id), svc: ProfileService = Depends(get_profile_service)):
    svc.delete_profile(user_id)
    return {"success": True, "message": "Profile deleted successfully"}


# ---------- socials / wallets / email ----------

@router.get("/socials")
def get_socials(user_id: str = Depends(get_current_user_id), svc: ProfileService = Depends(get_profile_service)):
    return {"socials": svc.get_socials(user_id)}


@router.put("/socials")
async def update_socials(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    svc: ProfileService = Depends(get_profile_service),
):
    """
    PUT /api/socials
    Partial update: only keys present in the body are written. website and
    linkedin get an https:// prefix when no protocol is given.
    """
    payload = await _json_body(request)
    return {"success": True, "socials": svc.update_socials(user_id, payload)}


@router.get("/wallets")
def get_wallets(user_id: str = Depends(get_current_user_id), svc: ProfileService = Depends(get_profile_service)):
    return {"wallets": svc.get_wallets(user_id)}


@router.put("/wallets")
async def update_wallets(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    svc: ProfileService = Depends(get_profile_service),
):
    payload = await _json_body(request)
    return {"success": True, "wallets": svc.update_wallets(user_id, payload)}


@router.get("/email")
def get_email(user_id: str = Depends(get_current_user_id), svc: ProfileService = Depends(get_profile_service)):
    return {"email": svc.get_email(user_id)}


@router.put("/email")
async def update_email(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    svc: ProfileService = Depends(get_profile_service),
):
    payload = await _json_body(request)
    try:
        data = EmailUpdate(**payload)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid email format")
    return {"success": True, "email": svc.update_email(user_id, data.email)}


# ---------- public profile ----------

@router.get("/profile/{username}")
def get_public_profile(username: str, svc: ProfileService = Depends(get_profile_service)):
    """
    GET /api/profile/{username}
    Public, unauthenticated. Served through the read-through cache; a missing
    username is cached as "not found" too, so repeated probes stay off the DB.

    Status codes:
      - 200: found
      - 400: blank username
      - 404: no such profile
    """
    username = username.strip()
    if not username:
        raise HTTPException(status_code=400, detail="Username is required")

    profile = svc.get_public_profile(username)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"profile": PublicProfileRead(**profile).model_dump()}
