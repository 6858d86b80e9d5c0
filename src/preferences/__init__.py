"""Per-user preferences and the threshold learning engine."""

from .engine import PreferenceLearningEngine
from .models import AcceptancePattern, ConfigurationError, PreferencesPatch, UserPreferences
from .store import PreferenceStore

__all__ = [
    "AcceptancePattern",
    "ConfigurationError",
    "PreferenceLearningEngine",
    "PreferenceStore",
    "PreferencesPatch",
    "UserPreferences",
]
