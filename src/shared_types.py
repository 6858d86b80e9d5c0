"""Shared enums for the journal extraction pipeline."""

from enum import StrEnum


class ItemType(StrEnum):
    """Kinds of candidate records an extraction batch can carry."""

    MOOD = "mood"
    TODO = "todo"
    MEDIA = "media"
    HABIT = "habit"


class SuggestionType(StrEnum):
    MOOD = "mood"
    TODO = "todo"
    MEDIA = "media"
    HABIT = "habit"
    REFLECTION = "reflection"


class PromptStyle(StrEnum):
    REFLECTIVE = "reflective"
    ACTIONABLE = "actionable"
    CREATIVE = "creative"
    ANALYTICAL = "analytical"


class OutcomeAction(StrEnum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class RecordType(StrEnum):
    MOOD = "mood"
    TODO = "todo"
    MEDIA = "media"
    HABIT = "habit"
    JOURNAL = "journal"


class MoodValue(StrEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    NEUTRAL = "neutral"
    BAD = "bad"
    TERRIBLE = "terrible"


class TodoTime(StrEnum):
    PAST = "past"
    FUTURE = "future"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MediaType(StrEnum):
    MOVIE = "movie"
    SHOW = "show"
    BOOK = "book"
    GAME = "game"
    PODCAST = "podcast"
    MUSIC = "music"


class MediaStatus(StrEnum):
    PLANNED = "planned"
    WATCHED = "watched"
    PLAYING = "playing"
    COMPLETED = "completed"
    READING = "reading"
    READ = "read"


class HabitStatus(StrEnum):
    DONE = "done"
    MISSED = "missed"


class HabitFrequency(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ErrorKind(StrEnum):
    """Why a candidate did not make it into the user's data."""

    VALIDATION = "validation"
    CONFIDENCE = "confidence"
    PERSISTENCE = "persistence"
