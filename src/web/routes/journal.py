"""Journal routes: entries and the extracted-actions commit (per-user)."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from extraction import MalformedBatchError
from journal import JournalNotFoundError
from preferences import ConfigurationError
from records.models import StoredRecord
from web.auth import get_current_user
from web.deps import get_engine, get_gate, get_journal
from web.models import CommitResponse, ExtractedActions, JournalCreate, JournalEntry
from web.routes.preferences import allowed_patch

logger = structlog.get_logger()

router = APIRouter(prefix="/api/journal", tags=["journal"])


def _to_entry(record: StoredRecord, with_content: bool = False) -> JournalEntry:
    return JournalEntry(
        id=record.id,
        title=record.get("title", ""),
        category=record.get("category", "daily"),
        date=record.get("date"),
        created_at=record.created_at.isoformat(),
        tags=record.get("tags") or [],
        analysis=record.get("analysis") or {},
        content=record.get("content") if with_content else None,
    )


@router.get("", response_model=list[JournalEntry])
async def list_entries(
    category: str | None = None,
    limit: int = Query(default=50, ge=1, le=200),
    user: dict = Depends(get_current_user),
):
    entries = get_journal(user["id"]).list_entries(user["id"], category=category, limit=limit)
    return [_to_entry(e) for e in entries]


@router.post("", response_model=JournalEntry, status_code=status.HTTP_201_CREATED)
async def create_entry(
    body: JournalCreate,
    user: dict = Depends(get_current_user),
):
    try:
        entry = get_journal(user["id"]).create(
            user["id"],
            body.content,
            title=body.title,
            category=body.category,
            tags=body.tags,
            energy=body.energy,
            activities=body.activities,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _to_entry(entry, with_content=True)


@router.post("/actions", response_model=CommitResponse)
async def save_extracted_actions(
    body: ExtractedActions,
    user: dict = Depends(get_current_user),
):
    """Commit extractor output for one journal entry.

    Responds 200 even when some items were rejected; the caller reads
    ``errors`` and ``partial_success``.
    """
    user_id = user["id"]
    try:
        journal = get_journal(user_id).get(user_id, body.journal_id)
    except JournalNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    engine = get_engine(user_id)
    if body.user_preferences:
        patch = allowed_patch(body.user_preferences)
        if patch:
            try:
                engine.update_preferences(user_id, patch)
            except ConfigurationError as e:
                raise HTTPException(status_code=400, detail=str(e))

    threshold = engine.current_threshold(user_id)
    try:
        result = get_gate(user_id).commit(
            user_id, body.extraction(), threshold, journal=journal
        )
    except MalformedBatchError as e:
        raise HTTPException(status_code=422, detail=str(e))

    logger.info(
        "journal.actions_committed",
        user_id=user_id,
        journal_id=journal.id,
        saved=result.saved_items.count(),
        errors=len(result.errors),
    )
    return CommitResponse(**result.to_dict(), threshold=threshold)


@router.get("/{journal_id}", response_model=JournalEntry)
async def read_entry(
    journal_id: str,
    user: dict = Depends(get_current_user),
):
    try:
        entry = get_journal(user["id"]).get(user["id"], journal_id)
    except JournalNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _to_entry(entry, with_content=True)
