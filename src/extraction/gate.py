"""Confidence gate: decides which validated candidates get written.

Items at or above the user's threshold are persisted one by one; everything
else is reported back with a reason. A failed write only costs that item:
the entries in a batch are independent facts, not a transaction.
"""

from datetime import date, datetime
from typing import Any

import structlog

from records.models import StoredRecord
from records.store import RecordBackend
from shared_types import ErrorKind, HabitStatus, ItemType, RecordType, TodoTime

from .models import (
    BatchOutcome,
    Candidate,
    CandidateHabit,
    CandidateMedia,
    CandidateMood,
    CandidateTodo,
    CommitResult,
    ItemError,
    ItemResult,
)
from .normalizer import is_valid_confidence
from .validator import validate_batch

logger = structlog.get_logger()

CONFIDENCE_REASON = "confidence < threshold"
HABIT_SCAN_LIMIT = 500

# Stored media vocabulary differs from what the extractor emits
_MEDIA_TYPE_MAP = {
    "movie": "movie",
    "show": "tv",
    "book": "book",
    "game": "game",
    "podcast": "podcast",
    "music": "music",
}

_MEDIA_STATUS_MAP = {
    "watched": "completed",
    "planned": "planned",
    "playing": "in_progress",
    "completed": "completed",
    "reading": "in_progress",
    "read": "completed",
}

_RECORD_TYPES = {
    ItemType.MOOD: RecordType.MOOD,
    ItemType.TODO: RecordType.TODO,
    ItemType.MEDIA: RecordType.MEDIA,
    ItemType.HABIT: RecordType.HABIT,
}


def map_media_type(media_type: str | None) -> str:
    return _MEDIA_TYPE_MAP.get((media_type or "").lower(), "other")


def map_media_status(status: str | None) -> str:
    return _MEDIA_STATUS_MAP.get((status or "").lower(), "other")


def _journal_date(journal: StoredRecord | None) -> str:
    if journal is None:
        return date.today().isoformat()
    return str(journal.get("date") or journal.created_at.date().isoformat())[:10]


class ConfidenceGate:
    """Partition a batch by confidence and persist what passes."""

    def __init__(self, records: RecordBackend):
        self.records = records

    def commit(
        self,
        user_id: str,
        batch: BatchOutcome | dict,
        threshold: float,
        journal: StoredRecord | None = None,
    ) -> CommitResult:
        """Commit every candidate in batch whose confidence >= threshold.

        Args:
            user_id: Owner of the records.
            batch: Raw extraction dict or an already validated BatchOutcome.
            threshold: The user's current threshold, read fresh by the caller.
            journal: Source journal entry; supplies date/energy/notes.
        """
        if not is_valid_confidence(threshold):
            raise ValueError(f"threshold must be a number in [0, 1], got {threshold!r}")

        outcome = validate_batch(batch)
        result = CommitResult()
        result.errors.extend(outcome.rejected)

        item_results: list[ItemResult[dict]] = []
        for item_type, index, candidate in outcome.normalized.items():
            if candidate.confidence < threshold:
                item_results.append(
                    ItemResult.failure(
                        item_type,
                        ItemError(
                            type=item_type,
                            reason=CONFIDENCE_REASON,
                            kind=ErrorKind.CONFIDENCE,
                            index=index,
                            confidence=candidate.confidence,
                        ),
                    )
                )
                continue
            item_results.append(self._persist(user_id, item_type, index, candidate, journal))

        for item in item_results:
            if item.ok:
                result.saved_items.add(item.item_type, item.value)
            else:
                result.errors.append(item.error)

        logger.info(
            "gate.committed",
            user_id=user_id,
            threshold=threshold,
            saved=result.saved_items.count(),
            invalid=len(result.errors_of(ErrorKind.VALIDATION)),
            below_threshold=len(result.errors_of(ErrorKind.CONFIDENCE)),
            failed=len(result.errors_of(ErrorKind.PERSISTENCE)),
        )
        return result

    def _persist(
        self,
        user_id: str,
        item_type: ItemType,
        index: int,
        candidate: Candidate,
        journal: StoredRecord | None,
    ) -> ItemResult[dict]:
        try:
            if isinstance(candidate, CandidateHabit):
                stored = self._upsert_habit(user_id, candidate, journal)
            else:
                record = self._build_record(candidate, journal)
                stored = self.records.create(user_id, _RECORD_TYPES[item_type], record)
            return ItemResult.success(item_type, stored.to_dict())
        except Exception as e:
            logger.warning(
                "gate.persist_failed",
                user_id=user_id,
                item_type=item_type.value,
                index=index,
                error=str(e),
            )
            return ItemResult.failure(
                item_type,
                ItemError(
                    type=item_type,
                    reason=f"persistence failed: {e}",
                    kind=ErrorKind.PERSISTENCE,
                    index=index,
                    confidence=candidate.confidence,
                ),
            )

    @staticmethod
    def _provenance(candidate: Candidate, journal: StoredRecord | None) -> dict[str, Any]:
        return {
            "confidence": candidate.confidence,
            "reasoning": candidate.reasoning,
            "source": "journal",
            "journal_id": journal.id if journal else None,
        }

    def _build_record(self, candidate: Candidate, journal: StoredRecord | None) -> dict:
        entry_date = _journal_date(journal)
        note = f"Extracted from journal entry on {entry_date}"

        if isinstance(candidate, CandidateMood):
            record = {
                "mood": candidate.value,
                "energy": (journal.get("energy") if journal else None) or "medium",
                "activities": (journal.get("activities") if journal else None) or [],
                "date": entry_date,
                "note": "Extracted from journal entry",
            }
        elif isinstance(candidate, CandidateTodo):
            record = {
                "title": candidate.title,
                "completed": candidate.time == TodoTime.PAST,
                "due_date": candidate.due_date,
                "priority": candidate.priority or "medium",
                "category": "Journal",
                "notes": note,
            }
        elif isinstance(candidate, CandidateMedia):
            record = {
                "title": candidate.title,
                "type": map_media_type(candidate.type),
                "status": map_media_status(candidate.status),
                "genre": "",
                "notes": note,
            }
        else:
            raise TypeError(f"Unsupported candidate: {type(candidate).__name__}")

        return {**record, **self._provenance(candidate, journal)}

    def _find_habit(self, user_id: str, name_key: str) -> StoredRecord | None:
        existing = self.records.find(user_id, RecordType.HABIT, {"name_key": name_key}, limit=1)
        if existing:
            return existing[0]
        # Habits created outside the gate only carry a display name
        for candidate in self.records.find(user_id, RecordType.HABIT, limit=HABIT_SCAN_LIMIT):
            if str(candidate.get("name") or "").strip().lower() == name_key:
                return candidate
        return None

    def _upsert_habit(
        self, user_id: str, habit: CandidateHabit, journal: StoredRecord | None
    ) -> StoredRecord:
        """Mark progress on an existing habit with the same name, or start a new one."""
        today = date.today().isoformat()
        name_key = habit.name.strip().lower()
        done = habit.status == HabitStatus.DONE

        current = self._find_habit(user_id, name_key)
        if current is not None:
            completed_dates = list(current.get("completed_dates") or [])
            patch: dict[str, Any] = {
                "last_extracted_at": datetime.now().isoformat(),
                "confidence": habit.confidence,
            }
            if done and today not in completed_dates:
                completed_dates.append(today)
                patch["completed_dates"] = completed_dates
                patch["streak"] = int(current.get("streak") or 0) + 1
            if habit.frequency and not current.get("frequency"):
                patch["frequency"] = habit.frequency
            if not current.get("name_key"):
                patch["name_key"] = name_key

            updated = self.records.update_one(user_id, RecordType.HABIT, current.id, patch)
            if updated is None:
                raise LookupError(f"habit {current.id} disappeared during update")
            return updated

        record = {
            "name": habit.name,
            "name_key": name_key,
            "category": "Journal",
            "frequency": habit.frequency or "daily",
            "completed_dates": [today] if done else [],
            "streak": 1 if done else 0,
            **self._provenance(habit, journal),
        }
        return self.records.create(user_id, RecordType.HABIT, record)
