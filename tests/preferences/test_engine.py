"""Tests for PreferenceLearningEngine."""

import sqlite3
from unittest.mock import MagicMock

import pytest

from preferences import ConfigurationError, PreferenceLearningEngine


def _feedback(engine, accepted, rejected, item_type="mood"):
    for _ in range(accepted):
        engine.record_outcome("u1", item_type, "accepted", 0.8)
    for _ in range(rejected):
        engine.record_outcome("u1", item_type, "rejected", 0.8)


def test_half_acceptance_keeps_threshold(engine):
    _feedback(engine, 5, 5)
    assert not engine.auto_adjust("u1")
    assert engine.current_threshold("u1") == 0.7


def test_high_acceptance_lowers_threshold(engine):
    _feedback(engine, 9, 1)
    assert engine.auto_adjust("u1")
    assert engine.current_threshold("u1") == 0.65


def test_record_outcome_does_not_bump_version(engine):
    _feedback(engine, 3, 0)
    assert engine.get_preferences("u1").version == 1


def test_track_interaction_adjusts_once_enough_data(engine):
    for _ in range(9):
        prefs = engine.track_interaction("u1", "todo", "accepted", 0.9)
        assert prefs.confidence_threshold == 0.7
    prefs = engine.track_interaction("u1", "todo", "accepted", 0.9)
    assert prefs.confidence_threshold == 0.65
    assert prefs.version == 2


def test_threshold_stays_within_bounds(engine):
    for _ in range(60):
        engine.track_interaction("u1", "todo", "accepted", 0.9)
    assert engine.current_threshold("u1") == 0.3

    for _ in range(400):
        engine.track_interaction("u1", "todo", "rejected", 0.9)
    assert engine.current_threshold("u1") == 0.95


def test_invalid_confidence_is_clamped(engine):
    prefs = engine.record_outcome("u1", "media", "accepted", confidence=4.2)
    assert prefs.acceptance_patterns["media"].average_confidence == 0.7


def test_invalid_action(engine):
    with pytest.raises(ValueError, match="Invalid action"):
        engine.record_outcome("u1", "mood", "maybe")


def test_invalid_item_type(engine):
    with pytest.raises(ValueError, match="Invalid item type"):
        engine.record_outcome("u1", "weather", "accepted")


class TestUpdates:
    def test_update_allowed_fields(self, engine):
        prefs = engine.update_preferences("u1", {"prompt_style": "actionable", "topics_of_interest": ["music"]})
        assert prefs.prompt_style == "actionable"
        assert prefs.topics_of_interest == ["music"]
        assert prefs.version == 2

    def test_unknown_field(self, engine):
        with pytest.raises(ConfigurationError):
            engine.update_preferences("u1", {"acceptance_patterns": {}})

    def test_min_above_max(self, engine):
        with pytest.raises(ConfigurationError):
            engine.update_preferences(
                "u1", {"min_confidence_threshold": 0.8, "max_confidence_threshold": 0.4}
            )
        assert engine.get_preferences("u1").version == 1

    def test_threshold_read_fresh(self, engine):
        assert engine.current_threshold("u1") == 0.7
        engine.update_preferences("u1", {"confidence_threshold": 0.9})
        assert engine.current_threshold("u1") == 0.9


def test_reset(engine):
    _feedback(engine, 9, 1)
    engine.auto_adjust("u1")
    prefs = engine.reset_preferences("u1")
    assert prefs.confidence_threshold == 0.7
    assert prefs.version == 1
    assert prefs.acceptance_patterns["mood"].accepted == 0


def test_acceptance_stats_and_export(engine):
    _feedback(engine, 3, 1, "todo")
    stats = engine.get_acceptance_stats("u1")
    assert stats["stats"]["todo"]["acceptance_rate"] == 0.75
    assert stats["stats"]["mood"]["total"] == 0

    exported = engine.export_preferences("u1")
    assert exported["preferences"]["user_id"] == "u1"
    assert "exported_at" in exported


def test_filters_fall_back_on_db_error():
    store = MagicMock()
    store.get_or_create.side_effect = sqlite3.OperationalError("locked")
    filters = PreferenceLearningEngine(store).get_filters("u1")
    assert filters["confidence_threshold"] == 0.7
    assert filters["types"] == ["mood", "reflection", "todo"]


def test_prioritize_suggestions(engine):
    _feedback(engine, 4, 0, "todo")
    _feedback(engine, 0, 4, "mood")
    suggestions = [
        {"type": "mood", "relevance": 0.9},
        {"type": "todo", "relevance": 0.8},
        {"type": "media", "relevance": 0.99},
        {"type": "reflection", "relevance": 0.5},
    ]
    ranked = engine.prioritize_suggestions(suggestions, "u1")
    # media is not an allowed type; reflection is under the threshold
    assert [s["type"] for s in ranked] == ["todo", "mood"]


def test_prioritize_drops_unusable_relevance(engine):
    suggestions = [
        {"type": "mood", "relevance": None},
        {"type": "mood", "relevance": "high"},
        {"type": "mood", "relevance": float("nan")},
        {"type": "mood"},
        {"type": "todo", "relevance": 0.9},
    ]
    ranked = engine.prioritize_suggestions(suggestions, "u1")
    assert ranked == [{"type": "todo", "relevance": 0.9}]


def test_empty_update_is_a_no_op(engine):
    prefs = engine.update_preferences("u1", {})
    assert prefs.version == 1
    assert engine.get_preferences("u1").version == 1
