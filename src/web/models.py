"""Pydantic request/response schemas for the web API."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# --- Journal ---


class JournalCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=100_000)
    title: Optional[str] = None
    category: str = "daily"
    tags: Optional[list[str]] = None
    energy: Optional[Literal["low", "medium", "high"]] = None
    activities: Optional[list[str]] = None


class JournalEntry(BaseModel):
    id: str
    title: str
    category: str
    date: Optional[str] = None
    created_at: str
    tags: list[str] = []
    analysis: dict = {}
    content: Optional[str] = None


# --- Extraction ---


class ExtractedActions(BaseModel):
    """Extractor output for one journal entry, plus optional preference changes.

    Item payloads stay loosely typed so that a bad item is reported back
    per item instead of failing the whole request.
    """

    journal_id: str = Field(..., min_length=1)
    mood: Optional[Any] = None
    todos: Optional[list[Any]] = None
    media: Optional[list[Any]] = None
    habits: Optional[list[Any]] = None
    confidence: Optional[float] = None
    user_preferences: Optional[dict] = None

    def extraction(self) -> dict:
        return self.model_dump(
            include={"mood", "todos", "media", "habits", "confidence"}, exclude_none=True
        )


class ItemErrorOut(BaseModel):
    type: str
    reason: str
    kind: str
    index: Optional[int] = None
    confidence: Optional[float] = None


class CommitResponse(BaseModel):
    saved_items: dict
    errors: list[ItemErrorOut] = []
    partial_success: bool = False
    threshold: float


# --- Preferences ---


class PreferencesUpdate(BaseModel):
    """Partial update; anything outside the allow-list is dropped."""

    model_config = ConfigDict(extra="ignore")

    suggestion_types: Optional[list[str]] = None
    confidence_threshold: Optional[float] = None
    prompt_style: Optional[str] = None
    topics_of_interest: Optional[list[str]] = None
    auto_adjust_threshold: Optional[bool] = None
    min_confidence_threshold: Optional[float] = None
    max_confidence_threshold: Optional[float] = None


class FeedbackEvent(BaseModel):
    item_type: Literal["mood", "todo", "media", "habit", "suggestion"]
    action: Literal["accepted", "rejected"]
    confidence: float = Field(0.7, ge=0.0, le=1.0)


class FeedbackResponse(BaseModel):
    item_type: str
    action: str
    confidence_threshold: float
    threshold_changed: bool
    version: int
