"""
FastAPI Profile Endpoints

Endpoints:
- GET /profile - The user's profile (empty profile if none saved)
- PUT /profile - Create or update the profile
- GET /profile/condition-defaults - Suggested locations/triggers for a diagnosis
"""

from fastapi import APIRouter, Query

from backend.painlog.analytics.conditions import detect_condition, smart_defaults
from backend.painlog.api.schemas import ConditionDefaultsResponse, Profile, ProfileUpdate
from backend.painlog.config import get_user_timezone
from backend.painlog.storage.db import get_db_connection
from backend.painlog.storage.profiles import get_profile, upsert_profile

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=Profile)
async def read_profile(
    user_id: str = Query(default="default_user", description="User identifier"),
) -> Profile:
    con = get_db_connection()
    try:
        row = get_profile(con, user_id)
    finally:
        con.close()

    if row is None:
        return Profile(user_id=user_id)
    return Profile(**row)


@router.put("", response_model=Profile)
async def save_profile(
    payload: ProfileUpdate,
    user_id: str = Query(default="default_user", description="User identifier"),
) -> Profile:
    """Fields left out of the body keep their stored value."""
    con = get_db_connection()
    try:
        row = upsert_profile(con, user_id, payload.model_dump(exclude_unset=True), get_user_timezone())
    finally:
        con.close()
    return Profile(**row)


@router.get("/condition-defaults", response_model=ConditionDefaultsResponse)
async def get_condition_defaults(
    diagnosis: str = Query(..., description="Free-text diagnosis"),
) -> ConditionDefaultsResponse:
    """
    Typical pain locations and triggers for a diagnosis.

    Unknown diagnoses return empty defaults rather than an error.
    """
    defaults = smart_defaults(diagnosis)
    return ConditionDefaultsResponse(
        diagnosis=diagnosis,
        condition=detect_condition(diagnosis),
        **defaults.to_dict(),
    )
