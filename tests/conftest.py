"""Shared test fixtures for Steward."""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def db_path(tmp_path):
    """One per-user database file, as the web and CLI layers use."""
    return tmp_path / "users" / "user-123" / "steward.db"


@pytest.fixture
def records(db_path):
    from records import RecordStore

    return RecordStore(db_path)


@pytest.fixture
def pref_store(db_path):
    from preferences import PreferenceStore

    return PreferenceStore(db_path)


@pytest.fixture
def engine(pref_store):
    from preferences import PreferenceLearningEngine

    return PreferenceLearningEngine(pref_store)


@pytest.fixture
def sample_extraction():
    """Extractor output with a mix of confident and unsure items."""
    return {
        "mood": {"value": "good", "confidence": 0.9, "reasoning": "Says they feel great"},
        "todos": [
            {"title": "Call mom", "time": "future", "priority": "high", "confidence": 0.8},
            {"title": "Maybe repaint the hall", "confidence": 0.3},
        ],
        "media": [
            {"title": "Dune", "type": "book", "status": "reading", "confidence": 0.85},
        ],
        "habits": [
            {"name": "Running", "status": "done", "frequency": "daily", "confidence": 0.95},
        ],
    }
