"""Dependency injection for FastAPI routes."""

from functools import lru_cache

import structlog

from cli.config import get_user_paths as _config_user_paths
from cli.config import load_config_model
from cli.config_models import StewardConfig
from context import ContextAggregator
from extraction import ConfidenceGate
from journal import JournalEntries
from preferences import PreferenceLearningEngine, PreferenceStore
from records import RecordStore

logger = structlog.get_logger()


@lru_cache
def get_config() -> StewardConfig:
    """Load shared config from config.yaml (cwd or ~/.steward/)."""
    return load_config_model()


def get_user_paths(user_id: str) -> dict:
    """Per-user data directory under {data_dir}/users/{user_id}/."""
    return _config_user_paths(get_config(), user_id)


def get_records(user_id: str) -> RecordStore:
    return RecordStore(get_user_paths(user_id)["db"])


def get_engine(user_id: str) -> PreferenceLearningEngine:
    learning = get_config().learning
    return PreferenceLearningEngine(
        PreferenceStore(get_user_paths(user_id)["db"]),
        min_interactions=learning.min_interactions,
        step=learning.step,
        high_acceptance=learning.high_acceptance,
        low_acceptance=learning.low_acceptance,
    )


def get_journal(user_id: str) -> JournalEntries:
    return JournalEntries(get_records(user_id))


def get_gate(user_id: str) -> ConfidenceGate:
    return ConfidenceGate(get_records(user_id))


def get_aggregator(user_id: str) -> ContextAggregator:
    return ContextAggregator(
        get_records(user_id),
        get_engine(user_id),
        max_items=get_config().context.max_items,
    )
