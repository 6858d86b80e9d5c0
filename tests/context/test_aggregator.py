"""Tests for ContextAggregator."""

from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest

from context import ContextAggregator, fallback_context, summarize_context
from journal import JournalEntries
from shared_types import RecordType


@pytest.fixture
def populated(records):
    """A week of data: a mood, todos, a book, a habit and a journal entry."""
    today = date.today()
    records.create("u1", RecordType.MOOD, {"mood": "good", "date": today.isoformat(), "confidence": 0.9})
    records.create(
        "u1",
        RecordType.TODO,
        {"title": "Later", "completed": False, "due_date": (today + timedelta(days=5)).isoformat(), "priority": "low"},
    )
    records.create(
        "u1",
        RecordType.TODO,
        {"title": "Soon", "completed": False, "due_date": (today + timedelta(days=1)).isoformat(), "priority": "high"},
    )
    records.create("u1", RecordType.TODO, {"title": "Whenever", "completed": False, "due_date": None})
    records.create(
        "u1",
        RecordType.TODO,
        {"title": "Overdue", "completed": False, "due_date": (today - timedelta(days=3)).isoformat()},
    )
    records.create("u1", RecordType.TODO, {"title": "Done", "completed": True})
    records.create("u1", RecordType.MEDIA, {"title": "Dune", "type": "book", "status": "in_progress"})
    records.create(
        "u1",
        RecordType.HABIT,
        {
            "name": "Running",
            "frequency": "daily",
            "streak": 2,
            "completed_dates": [(today - timedelta(days=1)).isoformat(), today.isoformat()],
        },
    )
    JournalEntries(records).create("u1", "Grateful for a productive morning writing code.")
    return records


class _FlakyRecords:
    """Delegates to a real store but fails reads of the given record types."""

    def __init__(self, store, failing):
        self.store = store
        self.failing = set(failing)

    def find(self, user_id, record_type, *args, **kwargs):
        if record_type in self.failing:
            raise RuntimeError(f"{record_type} read failed")
        return self.store.find(user_id, record_type, *args, **kwargs)

    def count(self, user_id, record_type, *args, **kwargs):
        if record_type in self.failing:
            raise RuntimeError(f"{record_type} count failed")
        return self.store.count(user_id, record_type, *args, **kwargs)


@pytest.mark.asyncio
async def test_full_context(populated, engine):
    bundle = await ContextAggregator(populated, engine).get_user_context("u1", days=7)

    assert not bundle.fallback
    assert bundle.degraded == []
    assert bundle.recent_moods[0]["mood"] == "good"
    assert [t["title"] for t in bundle.upcoming_todos] == ["Soon", "Later", "Whenever"]
    assert bundle.recent_media[0]["title"] == "Dune"

    habit = bundle.habit_progress[0]
    assert habit["status"] == "done"
    assert habit["streak"] == 2
    assert habit["completion_rate"] == round(2 / 7, 2)

    entry = bundle.journal_history[0]
    assert entry["sentiment"] == "Positive"
    assert "productive" in entry["keywords"]
    assert bundle.user_preferences["confidence_threshold"] == 0.7


@pytest.mark.asyncio
async def test_one_failing_read_degrades_only_that_slice(populated, engine):
    flaky = _FlakyRecords(populated, [RecordType.MOOD])
    bundle = await ContextAggregator(flaky, engine).get_user_context("u1")

    assert not bundle.fallback
    assert bundle.degraded == ["recent_moods"]
    assert bundle.recent_moods == []
    assert bundle.upcoming_todos
    assert bundle.habit_progress


@pytest.mark.asyncio
async def test_fallback_only_when_every_read_fails(populated):
    flaky = _FlakyRecords(populated, list(RecordType))
    engine = MagicMock()
    engine.get_preferences.side_effect = RuntimeError("prefs down")

    bundle = await ContextAggregator(flaky, engine).get_user_context("u1")

    assert bundle.fallback
    assert bundle.upcoming_todos[0]["title"] == "Review daily goals"


@pytest.mark.asyncio
async def test_preferences_failure_uses_default_filters(populated):
    engine = MagicMock()
    engine.get_preferences.side_effect = RuntimeError("prefs down")

    bundle = await ContextAggregator(populated, engine).get_user_context("u1")

    assert bundle.degraded == ["user_preferences"]
    assert bundle.user_preferences["types"] == ["mood", "reflection", "todo"]


@pytest.mark.asyncio
async def test_empty_user(records):
    bundle = await ContextAggregator(records).get_user_context("nobody")
    assert not bundle.fallback
    assert bundle.recent_moods == []
    assert bundle.user_preferences["prompt_style"] == "reflective"


@pytest.mark.asyncio
async def test_lightweight_context(populated):
    lite = await ContextAggregator(populated).get_lightweight_context("u1")
    assert lite["current_mood"] == "good"
    assert lite["active_todo_count"] == 4
    assert "productive" in lite["recent_keywords"]


@pytest.mark.asyncio
async def test_lightweight_context_never_raises(populated):
    flaky = _FlakyRecords(populated, [RecordType.TODO])
    lite = await ContextAggregator(flaky).get_lightweight_context("u1")
    assert lite["current_mood"] == "neutral"
    assert lite["active_todo_count"] == 0


def test_summarize_context():
    text = summarize_context(fallback_context())
    assert "generic context" in text
    assert "Review daily goals" in text
    assert "Daily reflection" in text


@pytest.mark.asyncio
async def test_fallback_when_database_is_unreadable(db_path, records, engine):
    records.create("u1", RecordType.MOOD, {"mood": "good"})
    engine.get_preferences("u1")
    for suffix in ("-wal", "-shm"):
        db_path.with_name(db_path.name + suffix).unlink(missing_ok=True)
    db_path.write_bytes(b"this is not a sqlite database" * 100)

    bundle = await ContextAggregator(records, engine).get_user_context("u1")

    assert bundle.fallback
    assert bundle.habit_progress[0]["name"] == "Daily reflection"


@pytest.mark.asyncio
async def test_fallback_without_engine_when_records_fail(populated):
    flaky = _FlakyRecords(populated, list(RecordType))
    bundle = await ContextAggregator(flaky).get_user_context("u1")
    assert bundle.fallback
