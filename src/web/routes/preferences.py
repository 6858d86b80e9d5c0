"""Preference routes: read, patch, reset, export, and outcome feedback."""

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from preferences import ConfigurationError
from web.auth import get_current_user
from web.deps import get_engine
from web.models import FeedbackEvent, FeedbackResponse, PreferencesUpdate

logger = structlog.get_logger()

router = APIRouter(prefix="/api/journal", tags=["preferences"])


def allowed_patch(raw: dict) -> dict:
    """Keep only the allow-listed preference fields that were actually sent."""
    try:
        return PreferencesUpdate.model_validate(raw).model_dump(exclude_unset=True)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid preferences: {e.errors()}")


@router.get("/preferences")
async def get_preferences(user: dict = Depends(get_current_user)):
    engine = get_engine(user["id"])
    prefs = engine.get_preferences(user["id"])
    return {
        "preferences": prefs.to_dict(),
        "stats": prefs.acceptance_stats(),
    }


@router.put("/preferences")
async def update_preferences(
    body: PreferencesUpdate,
    user: dict = Depends(get_current_user),
):
    patch = body.model_dump(exclude_unset=True)
    engine = get_engine(user["id"])
    try:
        prefs = engine.update_preferences(user["id"], patch)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"preferences": prefs.to_dict()}


@router.post("/preferences/reset")
async def reset_preferences(user: dict = Depends(get_current_user)):
    prefs = get_engine(user["id"]).reset_preferences(user["id"])
    return {"preferences": prefs.to_dict()}


@router.get("/preferences/export")
async def export_preferences(user: dict = Depends(get_current_user)):
    return get_engine(user["id"]).export_preferences(user["id"])


@router.post("/feedback", response_model=FeedbackResponse)
async def record_feedback(
    body: FeedbackEvent,
    user: dict = Depends(get_current_user),
):
    engine = get_engine(user["id"])
    before = engine.get_preferences(user["id"]).version
    prefs = engine.track_interaction(user["id"], body.item_type, body.action, body.confidence)
    return FeedbackResponse(
        item_type=body.item_type,
        action=body.action,
        confidence_threshold=prefs.confidence_threshold,
        threshold_changed=prefs.version != before,
        version=prefs.version,
    )
