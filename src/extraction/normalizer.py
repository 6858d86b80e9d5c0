"""Normalization of single AI-produced candidates.

Each ``normalize_*`` function takes whatever the model emitted for one item
and returns a ``NormalizeResult``: the canonical candidate plus any reasons it
is unusable. Confidence is never a reason to reject here, only clamped.
Everything in this module is pure.
"""

import math
from datetime import datetime
from enum import StrEnum
from typing import Any

from shared_types import (
    HabitFrequency,
    HabitStatus,
    ItemType,
    MediaStatus,
    MediaType,
    MoodValue,
    Priority,
    TodoTime,
)

from .models import (
    NO_REASONING,
    STRING_MOOD_REASONING,
    CandidateHabit,
    CandidateMedia,
    CandidateMood,
    CandidateTodo,
    NormalizeResult,
)

# Todos and habits are usually explicit statements, moods are inferred
DEFAULT_CONFIDENCE = {
    ItemType.MOOD: 0.5,
    ItemType.TODO: 0.7,
    ItemType.MEDIA: 0.7,
    ItemType.HABIT: 0.7,
}


def _values(enum_cls: type[StrEnum]) -> set[str]:
    return {e.value for e in enum_cls}


def _choices(enum_cls: type[StrEnum]) -> str:
    return ", ".join(e.value for e in enum_cls)


def is_valid_confidence(value: Any) -> bool:
    """True for a finite real number in [0, 1]. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and 0.0 <= value <= 1.0


def clamp_confidence(value: Any, default: float) -> float:
    """Return value if it is a usable confidence, else default."""
    if is_valid_confidence(value):
        return float(value)
    return default


def confidence_level(confidence: Any) -> str:
    """Human-readable bucket for a confidence score."""
    if not is_valid_confidence(confidence):
        return "Unknown"
    if confidence >= 0.9:
        return "Very High"
    if confidence >= 0.8:
        return "High"
    if confidence >= 0.6:
        return "Medium"
    if confidence >= 0.4:
        return "Low"
    return "Very Low"


def filter_by_confidence(items: list, threshold: float = 0.7) -> list:
    """Keep items (dicts or candidates) whose confidence is valid and >= threshold."""
    if not isinstance(items, list):
        return []
    kept = []
    for item in items:
        conf = item.get("confidence", 0) if isinstance(item, dict) else getattr(item, "confidence", 0)
        if is_valid_confidence(conf) and conf >= threshold:
            kept.append(item)
    return kept


def _reasoning(raw: dict) -> str:
    reasoning = raw.get("reasoning")
    if isinstance(reasoning, str) and reasoning.strip():
        return reasoning
    return NO_REASONING


def _required_text(raw: dict, key: str, label: str, errors: list[str]) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        errors.append(f"{label} {key} is required and must be a string")
        return ""
    return value.strip()


def _optional_enum(
    raw: dict,
    key: str,
    enum_cls: type[StrEnum],
    label: str,
    errors: list[str],
    default: str | None,
) -> str | None:
    """Lowercased enum value; absent/None means default, anything else must match."""
    value = raw.get(key)
    if value is None or value == "":
        return default
    if isinstance(value, str) and value.strip().lower() in _values(enum_cls):
        return value.strip().lower()
    errors.append(f"{label} {key} must be one of: {_choices(enum_cls)}")
    return default


def normalize_mood(raw: Any) -> NormalizeResult:
    """Mood arrives as a bare string ("good") or an object with value/confidence."""
    if raw is None:
        return NormalizeResult(valid=False, errors=["Mood data is required"])

    if isinstance(raw, str):
        raw = {"value": raw, "reasoning": STRING_MOOD_REASONING}
    elif not isinstance(raw, dict):
        return NormalizeResult(valid=False, errors=["Mood must be a string or object"])

    errors: list[str] = []
    value = raw.get("value")
    if not isinstance(value, str) or not value.strip():
        errors.append("Mood value is required and must be a string")
        value = ""
    else:
        value = value.strip().lower()
        if value not in _values(MoodValue):
            errors.append(f"Mood value must be one of: {_choices(MoodValue)}")

    mood = CandidateMood(
        value=value,
        confidence=clamp_confidence(raw.get("confidence"), DEFAULT_CONFIDENCE[ItemType.MOOD]),
        reasoning=_reasoning(raw),
    )
    return NormalizeResult(valid=not errors, errors=errors, normalized=mood)


def normalize_todo(raw: Any) -> NormalizeResult:
    if not isinstance(raw, dict):
        return NormalizeResult(valid=False, errors=["Todo must be an object"])

    errors: list[str] = []
    title = _required_text(raw, "title", "Todo", errors)
    time = _optional_enum(raw, "time", TodoTime, "Todo", errors, TodoTime.FUTURE.value)
    priority = _optional_enum(raw, "priority", Priority, "Todo", errors, Priority.MEDIUM.value)

    due_date = raw.get("due_date", raw.get("dueDate"))
    if due_date in ("", None):
        due_date = None
    elif not isinstance(due_date, str):
        errors.append("Todo due date must be a valid date string")
        due_date = None
    else:
        try:
            datetime.fromisoformat(due_date)
        except ValueError:
            errors.append("Todo due date must be a valid date string")
            due_date = None

    todo = CandidateTodo(
        title=title,
        time=time,
        priority=priority,
        due_date=due_date,
        confidence=clamp_confidence(raw.get("confidence"), DEFAULT_CONFIDENCE[ItemType.TODO]),
        reasoning=_reasoning(raw),
    )
    return NormalizeResult(valid=not errors, errors=errors, normalized=todo)


def normalize_media(raw: Any) -> NormalizeResult:
    if not isinstance(raw, dict):
        return NormalizeResult(valid=False, errors=["Media must be an object"])

    errors: list[str] = []
    title = _required_text(raw, "title", "Media", errors)
    media_type = _optional_enum(raw, "type", MediaType, "Media", errors, None)
    status = _optional_enum(raw, "status", MediaStatus, "Media", errors, MediaStatus.PLANNED.value)

    media = CandidateMedia(
        title=title,
        type=media_type,
        status=status,
        confidence=clamp_confidence(raw.get("confidence"), DEFAULT_CONFIDENCE[ItemType.MEDIA]),
        reasoning=_reasoning(raw),
    )
    return NormalizeResult(valid=not errors, errors=errors, normalized=media)


def normalize_habit(raw: Any) -> NormalizeResult:
    if not isinstance(raw, dict):
        return NormalizeResult(valid=False, errors=["Habit must be an object"])

    errors: list[str] = []
    name = _required_text(raw, "name", "Habit", errors)
    status = _optional_enum(raw, "status", HabitStatus, "Habit", errors, HabitStatus.DONE.value)
    frequency = _optional_enum(
        raw, "frequency", HabitFrequency, "Habit", errors, HabitFrequency.DAILY.value
    )

    habit = CandidateHabit(
        name=name,
        status=status,
        frequency=frequency,
        confidence=clamp_confidence(raw.get("confidence"), DEFAULT_CONFIDENCE[ItemType.HABIT]),
        reasoning=_reasoning(raw),
    )
    return NormalizeResult(valid=not errors, errors=errors, normalized=habit)


_NORMALIZERS = {
    ItemType.MOOD: normalize_mood,
    ItemType.TODO: normalize_todo,
    ItemType.MEDIA: normalize_media,
    ItemType.HABIT: normalize_habit,
}


def normalize(kind: ItemType | str, raw: Any) -> NormalizeResult:
    """Normalize one raw candidate of the given kind.

    Already-normalized candidates (dataclass instances) are accepted and come
    back unchanged in value.
    """
    item_type = ItemType(kind)
    if hasattr(raw, "to_dict"):
        raw = raw.to_dict()
    return _NORMALIZERS[item_type](raw)
