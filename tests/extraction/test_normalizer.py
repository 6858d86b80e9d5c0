"""Tests for candidate normalization and confidence helpers."""

import math

import pytest

from extraction.models import NO_REASONING, STRING_MOOD_REASONING, CandidateTodo
from extraction.normalizer import (
    clamp_confidence,
    confidence_level,
    filter_by_confidence,
    is_valid_confidence,
    normalize,
)


class TestConfidence:
    @pytest.mark.parametrize("value", [0, 0.0, 0.5, 1, 1.0])
    def test_valid_values(self, value):
        assert is_valid_confidence(value)

    @pytest.mark.parametrize(
        "value", [-0.1, 1.01, math.nan, math.inf, "0.9", None, True, False, [0.5]]
    )
    def test_invalid_values(self, value):
        assert not is_valid_confidence(value)

    def test_clamp_keeps_valid(self):
        assert clamp_confidence(0.42, 0.7) == 0.42

    def test_clamp_falls_back_to_default(self):
        assert clamp_confidence(1.5, 0.7) == 0.7
        assert clamp_confidence("high", 0.5) == 0.5
        assert clamp_confidence(math.nan, 0.5) == 0.5

    def test_confidence_levels(self):
        assert confidence_level(0.95) == "Very High"
        assert confidence_level(0.8) == "High"
        assert confidence_level(0.6) == "Medium"
        assert confidence_level(0.4) == "Low"
        assert confidence_level(0.1) == "Very Low"
        assert confidence_level("x") == "Unknown"

    def test_filter_by_confidence(self):
        items = [
            {"title": "a", "confidence": 0.9},
            {"title": "b", "confidence": 0.5},
            {"title": "c", "confidence": "bad"},
            CandidateTodo(title="d", confidence=0.7),
        ]
        kept = filter_by_confidence(items, threshold=0.7)
        assert [getattr(i, "title", None) or i["title"] for i in kept] == ["a", "d"]

    def test_filter_non_list(self):
        assert filter_by_confidence("nope") == []


class TestMood:
    def test_string_mood_gets_defaults(self):
        result = normalize("mood", "good")
        assert result.valid
        assert result.normalized.value == "good"
        assert result.normalized.confidence == 0.5
        assert result.normalized.reasoning == STRING_MOOD_REASONING

    def test_string_mood_outside_enum(self):
        """Free-text moods are normalized first, then rejected by the enum check."""
        result = normalize("mood", "happy")
        assert not result.valid
        assert result.normalized.value == "happy"
        assert result.normalized.confidence == 0.5
        assert result.normalized.reasoning == STRING_MOOD_REASONING
        assert "Mood value must be one of" in result.errors[0]

    def test_object_mood(self):
        result = normalize("mood", {"value": "Excellent", "confidence": 0.9, "reasoning": "r"})
        assert result.valid
        assert result.normalized.value == "excellent"
        assert result.normalized.confidence == 0.9
        assert result.normalized.reasoning == "r"

    def test_out_of_range_confidence_is_clamped_not_rejected(self):
        result = normalize("mood", {"value": "bad", "confidence": 7})
        assert result.valid
        assert result.normalized.confidence == 0.5

    def test_missing_mood(self):
        result = normalize("mood", None)
        assert not result.valid
        assert result.errors == ["Mood data is required"]

    def test_wrong_shape(self):
        result = normalize("mood", 42)
        assert not result.valid
        assert result.errors == ["Mood must be a string or object"]


class TestTodo:
    def test_defaults(self):
        result = normalize("todo", {"title": "  Buy milk "})
        assert result.valid
        todo = result.normalized
        assert todo.title == "Buy milk"
        assert todo.time == "future"
        assert todo.priority == "medium"
        assert todo.confidence == 0.7
        assert todo.reasoning == NO_REASONING

    def test_missing_title(self):
        result = normalize("todo", {"title": "   "})
        assert not result.valid
        assert result.errors == ["Todo title is required and must be a string"]

    def test_bad_enum_values(self):
        result = normalize("todo", {"title": "x", "time": "someday", "priority": "urgent"})
        assert not result.valid
        assert len(result.errors) == 2
        assert "Todo time must be one of: past, future" in result.errors

    def test_due_date_camel_case(self):
        result = normalize("todo", {"title": "x", "dueDate": "2026-11-01"})
        assert result.valid
        assert result.normalized.due_date == "2026-11-01"

    def test_bad_due_date(self):
        result = normalize("todo", {"title": "x", "due_date": "next tuesday"})
        assert not result.valid
        assert result.errors == ["Todo due date must be a valid date string"]

    def test_not_an_object(self):
        assert not normalize("todo", "Buy milk").valid

    def test_accepts_candidate_instances(self):
        result = normalize("todo", CandidateTodo(title="Ship it", confidence=0.9))
        assert result.valid
        assert result.normalized == CandidateTodo(title="Ship it", confidence=0.9)


class TestMediaAndHabit:
    def test_media_type_optional(self):
        result = normalize("media", {"title": "Dune"})
        assert result.valid
        assert result.normalized.type is None
        assert result.normalized.status == "planned"

    def test_media_bad_type(self):
        result = normalize("media", {"title": "Dune", "type": "novel"})
        assert not result.valid
        assert "Media type must be one of" in result.errors[0]

    def test_habit_defaults(self):
        result = normalize("habit", {"name": "Meditate"})
        assert result.valid
        assert result.normalized.status == "done"
        assert result.normalized.frequency == "daily"

    def test_habit_missing_name(self):
        result = normalize("habit", {"status": "done"})
        assert not result.valid
        assert result.errors == ["Habit name is required and must be a string"]

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            normalize("reflection", {})
