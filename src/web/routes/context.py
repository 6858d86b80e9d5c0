"""Context routes: aggregated user context for prompting."""

from fastapi import APIRouter, Depends, Query

from context import summarize_context
from web.auth import get_current_user
from web.deps import get_aggregator

router = APIRouter(prefix="/api/journal/context", tags=["context"])


@router.get("")
async def user_context(
    days: int = Query(default=7, ge=1, le=365),
    user: dict = Depends(get_current_user),
):
    bundle = await get_aggregator(user["id"]).get_user_context(user["id"], days=days)
    return {**bundle.to_dict(), "summary": summarize_context(bundle)}


@router.get("/lite")
async def lightweight_context(user: dict = Depends(get_current_user)):
    return await get_aggregator(user["id"]).get_lightweight_context(user["id"])
