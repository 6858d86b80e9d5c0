"""Journal entries stored as records, with lexical analysis attached."""

import re
from datetime import datetime
from typing import Optional

import structlog

from records.models import StoredRecord
from records.store import RecordStore
from shared_types import RecordType

from .analysis import analyze_entry

logger = structlog.get_logger()

MAX_CONTENT_LENGTH = 100_000  # 100KB
MAX_TAG_LENGTH = 50
MAX_TAGS = 20
ENERGY_LEVELS = ("low", "medium", "high")


class JournalNotFoundError(LookupError):
    """No journal entry with that id for this user."""

    def __init__(self, journal_id: str):
        super().__init__(f"Journal entry not found: {journal_id}")
        self.journal_id = journal_id


def _sanitize_tag(tag: str) -> str:
    return re.sub(r"[^\w\s-]", "", tag).strip()[:MAX_TAG_LENGTH]


class JournalEntries:
    """Create, list and look up a user's journal entries."""

    def __init__(self, records: RecordStore):
        self.records = records

    def create(
        self,
        user_id: str,
        content: str,
        title: Optional[str] = None,
        category: str = "daily",
        tags: Optional[list[str]] = None,
        energy: Optional[str] = None,
        activities: Optional[list[str]] = None,
    ) -> StoredRecord:
        """Store a new entry.

        Raises:
            ValueError: If content is empty or too long, or energy is unknown.
        """
        if not content or not content.strip():
            raise ValueError("Journal content is required")
        if len(content) > MAX_CONTENT_LENGTH:
            raise ValueError(f"Content exceeds max length ({MAX_CONTENT_LENGTH} chars)")
        if energy is not None and energy not in ENERGY_LEVELS:
            raise ValueError(f"Invalid energy '{energy}'. Must be one of {ENERGY_LEVELS}")

        now = datetime.now()
        if tags:
            tags = [_sanitize_tag(t) for t in tags[:MAX_TAGS] if t.strip()]

        entry = self.records.create(
            user_id,
            RecordType.JOURNAL,
            {
                "title": title or now.strftime("%B %d, %Y"),
                "content": content,
                "category": category,
                "tags": tags or [],
                "date": now.date().isoformat(),
                "energy": energy,
                "activities": activities or [],
                "analysis": analyze_entry(content),
            },
        )
        logger.info("journal.created", user_id=user_id, journal_id=entry.id)
        return entry

    def get(self, user_id: str, journal_id: str) -> StoredRecord:
        entry = self.records.get(user_id, RecordType.JOURNAL, journal_id)
        if entry is None:
            raise JournalNotFoundError(journal_id)
        return entry

    def list_entries(
        self, user_id: str, category: Optional[str] = None, limit: int = 50
    ) -> list[StoredRecord]:
        filters = {"category": category} if category else None
        return self.records.find(user_id, RecordType.JOURNAL, filters, limit=limit)
