# antiresume/routers/resume.py

import json
import logging
from pathlib import Path
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from jsonschema import Draft7Validator

from antiresume.routers.profiles import get_current_user_id, get_profile_service
from antiresume.schemas.profile import ResumePayload, ResumeRead
from antiresume.services.profile_service import ProfileService
from antiresume.services.sanitize import extract_tweet_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resume", tags=["resume"])

# Load and prepare schema once at import time
schema_path = Path(__file__).resolve().parents[1] / "schemas" / "resume_schema.json"
with schema_path.open("r", encoding="utf-8") as f:
    resume_schema = json.load(f)

resume_validator = Draft7Validator(resume_schema)


async def _tweets_from_request(request: Request):
    """
    Parse and validate the resume body. Returns (tweets, None) on success or
    (None, JSONResponse) with a 400 listing every schema violation, or every
    link that is not an X/Twitter post.
    """
    try:
        payload = await request.json()
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid JSON format")

    validation_errors = sorted(resume_validator.iter_errors(payload), key=lambda e: e.json_path)
    if validation_errors:
        return None, JSONResponse(
            status_code=400,
            content={"validationErrors": [e.message for e in validation_errors]},
        )

    data = ResumePayload(**payload)
    bad_links = [
        f"tweets[{i}].tweet_link is not a post URL: {t.tweet_link}"
        for i, t in enumerate(data.tweets)
        if extract_tweet_id(t.tweet_link) is None
    ]
    if bad_links:
        return None, JSONResponse(status_code=400, content={"validationErrors": bad_links})
    return [t.model_dump() for t in data.tweets], None


@router.get("")
def get_resume(user_id: str = Depends(get_current_user_id), svc: ProfileService = Depends(get_profile_service)):
    """
    GET /api/resume
    Returns {"resume": null} when the user has no resume yet.
    """
    resume = svc.get_resume(user_id)
    return {"resume": ResumeRead(**resume).model_dump() if resume else None}


@router.post("")
async def create_resume(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    svc: ProfileService = Depends(get_profile_service),
):
    """
    POST /api/resume
    Status codes:
      - 200: created
      - 400: schema validation failed (validationErrors list)
      - 404: no profile yet
      - 409: resume exists; use PUT
    """
    tweets, error_response = await _tweets_from_request(request)
    if error_response is not None:
        return error_response
    resume = svc.create_resume(user_id, tweets)
    return {"success": True, "resume": ResumeRead(**resume).model_dump()}


@router.put("")
async def update_resume(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    svc: ProfileService = Depends(get_profile_service),
):
    """
    PUT /api/resume
    Replaces the whole post list; list order is the display order.
    """
    tweets, error_response = await _tweets_from_request(request)
    if error_response is not None:
        return error_response
    resume = svc.update_resume(user_id, tweets)
    return {
        "success": True,
        "resume": ResumeRead(**resume).model_dump(),
        "message": "Resume updated successfully",
    }


@router.delete("")
def delete_resume(user_id: str = Depends(get_current_user_id), svc: ProfileService = Depends(get_profile_service)):
    svc.delete_resume(user_id)
    return {"success": True, "message": "Resume deleted successfully"}
