"""User context aggregation for journal prompting and suggestion ranking.

``get_user_context`` fans out one read per slice (moods, todos, media,
habits, journal history, preferences) and waits for all of them. A failing
slice comes back empty; only when every slice that actually reads fails
(preferences only count with an engine), or the fan-out itself blows up,
does the caller get the static fallback bundle.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from functools import partial
from typing import Any

import structlog

from preferences.engine import PreferenceLearningEngine
from preferences.models import UserPreferences
from records.store import RecordStore
from shared_types import RecordType

logger = structlog.get_logger()

_PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


@dataclass
class ContextBundle:
    recent_moods: list[dict] = field(default_factory=list)
    upcoming_todos: list[dict] = field(default_factory=list)
    recent_media: list[dict] = field(default_factory=list)
    habit_progress: list[dict] = field(default_factory=list)
    journal_history: list[dict] = field(default_factory=list)
    user_preferences: dict = field(default_factory=dict)
    context_generated_at: str = field(default_factory=lambda: datetime.now().isoformat())
    fallback: bool = False
    degraded: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "recent_moods": self.recent_moods,
            "upcoming_todos": self.upcoming_todos,
            "recent_media": self.recent_media,
            "habit_progress": self.habit_progress,
            "journal_history": self.journal_history,
            "user_preferences": self.user_preferences,
            "context_generated_at": self.context_generated_at,
            "fallback": self.fallback,
            "degraded": list(self.degraded),
        }


def fallback_context() -> ContextBundle:
    """Generic stand-in used when no live data could be read."""
    now = datetime.now().isoformat()
    return ContextBundle(
        recent_moods=[{"mood": "neutral", "value": "neutral", "confidence": 0.5, "date": now}],
        upcoming_todos=[{"title": "Review daily goals", "priority": "medium", "confidence": 0.8}],
        recent_media=[
            {
                "title": "Personal development book",
                "type": "book",
                "status": "reading",
                "confidence": 0.7,
            }
        ],
        habit_progress=[
            {
                "name": "Daily reflection",
                "status": "done",
                "streak": 3,
                "frequency": "daily",
                "confidence": 0.9,
            }
        ],
        journal_history=[
            {
                "title": "Daily thoughts",
                "keywords": ["reflection", "goals"],
                "sentiment": "Positive",
                "date": now,
            }
        ],
        user_preferences={"types": ["reflection", "mood"], "confidence_threshold": 0.7},
        fallback=True,
    )


class ContextAggregator:
    """Builds context bundles from a user's records and preferences."""

    def __init__(
        self,
        records: RecordStore,
        preferences: PreferenceLearningEngine | None = None,
        max_items: int = 10,
    ):
        self.records = records
        self.preferences = preferences
        self.max_items = max_items

    async def get_user_context(self, user_id: str, days: int = 7) -> ContextBundle:
        """Trailing ``days`` of activity for one user."""
        start = datetime.now() - timedelta(days=days)
        reads: dict[str, tuple[Callable[[], Any], Any]] = {
            "recent_moods": (partial(self._recent_moods, user_id, start), []),
            "upcoming_todos": (partial(self._upcoming_todos, user_id), []),
            "recent_media": (partial(self._recent_media, user_id, start), []),
            "habit_progress": (partial(self._habit_progress, user_id, start, days), []),
            "journal_history": (partial(self._journal_history, user_id, start), []),
            "user_preferences": (
                partial(self._preferences, user_id),
                UserPreferences(user_id=user_id).suggestion_filters(),
            ),
        }

        try:
            results = await asyncio.gather(
                *(self._read(name, fn, default) for name, (fn, default) in reads.items())
            )
        except Exception as e:
            logger.error("context.aggregation_failed", user_id=user_id, error=str(e))
            return fallback_context()

        degraded = [name for name, (ok, _) in zip(reads, results) if not ok]
        # Without an engine the preferences slice is static defaults, not a read
        live = [
            name for name in reads if name != "user_preferences" or self.preferences is not None
        ]
        if all(name in degraded for name in live):
            logger.warning("context.all_reads_failed", user_id=user_id)
            return fallback_context()

        values = {name: value for name, (_, value) in zip(reads, results)}
        return ContextBundle(**values, degraded=degraded)

    async def get_lightweight_context(self, user_id: str) -> dict:
        """Latest mood, open todo count and latest journal keywords.

        For high-frequency callers; never raises.
        """
        try:
            latest_mood, active_todos, latest_journal = await asyncio.gather(
                asyncio.to_thread(
                    self.records.find, user_id, RecordType.MOOD, None, 1, order_by="date"
                ),
                asyncio.to_thread(
                    self.records.count, user_id, RecordType.TODO, {"completed": False}
                ),
                asyncio.to_thread(self.records.find, user_id, RecordType.JOURNAL, None, 1),
            )
        except Exception as e:
            logger.warning("context.lightweight_failed", user_id=user_id, error=str(e))
            return {
                "current_mood": "neutral",
                "active_todo_count": 0,
                "recent_keywords": [],
                "timestamp": datetime.now().isoformat(),
            }

        analysis = latest_journal[0].get("analysis") or {} if latest_journal else {}
        return {
            "current_mood": latest_mood[0].get("mood") if latest_mood else None,
            "active_todo_count": active_todos,
            "recent_keywords": list(analysis.get("keywords") or []),
            "timestamp": datetime.now().isoformat(),
        }

    async def _read(self, name: str, fn: Callable[[], Any], default: Any) -> tuple[bool, Any]:
        try:
            return True, await asyncio.to_thread(fn)
        except Exception as e:
            logger.warning("context.read_failed", slice=name, error=str(e))
            return False, default

    # --- slices ---

    def _recent_moods(self, user_id: str, start: datetime) -> list[dict]:
        moods = self.records.find(
            user_id, RecordType.MOOD, since=start, limit=self.max_items, order_by="date"
        )
        return [
            {
                "mood": m.get("mood"),
                "value": m.get("mood"),
                "confidence": m.get("confidence") or 0.8,
                "date": m.get("date") or m.created_at.isoformat(),
                "energy": m.get("energy"),
            }
            for m in moods
        ]

    def _upcoming_todos(self, user_id: str) -> list[dict]:
        today = date.today().isoformat()
        open_todos = self.records.find(
            user_id, RecordType.TODO, {"completed": False}, limit=self.max_items * 10
        )
        upcoming = [t for t in open_todos if not t.get("due_date") or t.get("due_date")[:10] >= today]
        # Soonest due first, undated last, higher priority breaks ties
        upcoming.sort(
            key=lambda t: (
                t.get("due_date") is None,
                t.get("due_date") or "",
                _PRIORITY_RANK.get(t.get("priority"), 1),
            )
        )
        return [
            {
                "title": t.get("title"),
                "due_date": t.get("due_date"),
                "priority": t.get("priority"),
                "category": t.get("category"),
                "confidence": t.get("confidence") or 0.9,
            }
            for t in upcoming[: self.max_items]
        ]

    def _recent_media(self, user_id: str, start: datetime) -> list[dict]:
        media = self.records.find(
            user_id, RecordType.MEDIA, touched_since=start, limit=self.max_items
        )
        return [
            {
                "title": m.get("title"),
                "type": m.get("type"),
                "status": m.get("status"),
                "genre": m.get("genre"),
                "confidence": m.get("confidence") or 0.8,
            }
            for m in media
        ]

    def _habit_progress(self, user_id: str, start: datetime, days: int) -> list[dict]:
        habits = self.records.find(user_id, RecordType.HABIT, limit=100)
        today = date.today().isoformat()
        window_start = start.date().isoformat()
        total_days = max(1, days)

        progress = []
        for habit in habits:
            completed = [str(d)[:10] for d in habit.get("completed_dates") or []]
            recent = [d for d in completed if d >= window_start]
            progress.append(
                {
                    "name": habit.get("name"),
                    "status": "done" if today in completed else "pending",
                    "streak": habit.get("streak") or 0,
                    "frequency": habit.get("frequency") or "daily",
                    "completion_rate": round(len(recent) / total_days, 2),
                    "confidence": 0.9,
                }
            )
        return progress

    def _journal_history(self, user_id: str, start: datetime) -> list[dict]:
        entries = self.records.find(
            user_id, RecordType.JOURNAL, since=start, limit=self.max_items
        )
        history = []
        for entry in entries:
            analysis = entry.get("analysis") or {}
            history.append(
                {
                    "id": entry.id,
                    "title": entry.get("title"),
                    "category": entry.get("category"),
                    "keywords": analysis.get("keywords") or [],
                    "sentiment": analysis.get("sentiment"),
                    "summary": analysis.get("summary"),
                    "date": entry.created_at.isoformat(),
                }
            )
        return history

    def _preferences(self, user_id: str) -> dict:
        if self.preferences is None:
            return UserPreferences(user_id=user_id).suggestion_filters()
        return self.preferences.get_preferences(user_id).suggestion_filters()


def summarize_context(bundle: ContextBundle, max_items: int = 3) -> str:
    """Compact text rendering of a bundle for an extraction prompt."""
    lines = []
    if bundle.fallback:
        lines.append("(generic context: no recent user data available)")

    moods = [m.get("mood") for m in bundle.recent_moods[:max_items] if m.get("mood")]
    if moods:
        lines.append(f"Recent moods: {', '.join(moods)}")

    todos = [t.get("title") for t in bundle.upcoming_todos[:max_items] if t.get("title")]
    if todos:
        lines.append(f"Open todos: {'; '.join(todos)}")

    media = [
        f"{m.get('title')} ({m.get('status')})"
        for m in bundle.recent_media[:max_items]
        if m.get("title")
    ]
    if media:
        lines.append(f"Recent media: {'; '.join(media)}")

    habits = [
        f"{h.get('name')} [{h.get('status')}, streak {h.get('streak', 0)}]"
        for h in bundle.habit_progress[:max_items]
        if h.get("name")
    ]
    if habits:
        lines.append(f"Habits: {'; '.join(habits)}")

    keywords: list[str] = []
    for entry in bundle.journal_history:
        for kw in entry.get("keywords") or []:
            if kw not in keywords:
                keywords.append(kw)
    if keywords:
        lines.append(f"Recent themes: {', '.join(keywords[: max_items * 3])}")

    prefs = bundle.user_preferences or {}
    if prefs.get("topics_of_interest"):
        lines.append(f"Interests: {', '.join(prefs['topics_of_interest'])}")
    if prefs.get("prompt_style"):
        lines.append(f"Preferred style: {prefs['prompt_style']}")

    return "\n".join(lines)
