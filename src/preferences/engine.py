"""Preference learning: turns accept/reject feedback into a threshold."""

import sqlite3
from datetime import datetime

import structlog
from pydantic import ValidationError

from extraction.normalizer import clamp_confidence, is_valid_confidence
from shared_types import OutcomeAction

from .models import (
    ADJUST_STEP,
    DEFAULT_AVERAGE_CONFIDENCE,
    HIGH_ACCEPTANCE,
    LOW_ACCEPTANCE,
    MIN_INTERACTIONS,
    PATTERN_TYPES,
    ConfigurationError,
    PreferencesPatch,
    UserPreferences,
)
from .store import PreferenceStore

logger = structlog.get_logger()

# Ranking weights for follow-up suggestions
RELEVANCE_WEIGHT = 0.7
ACCEPTANCE_WEIGHT = 0.3


class PreferenceLearningEngine:
    """Reads and writes a user's preferences through the store.

    Version rule: explicit updates and threshold-moving auto-adjustments bump
    ``version``; recording an outcome only bumps ``last_updated``; reset starts
    over at version 1.
    """

    def __init__(
        self,
        store: PreferenceStore,
        min_interactions: int = MIN_INTERACTIONS,
        step: float = ADJUST_STEP,
        high_acceptance: float = HIGH_ACCEPTANCE,
        low_acceptance: float = LOW_ACCEPTANCE,
    ):
        self.store = store
        self.min_interactions = min_interactions
        self.step = step
        self.high_acceptance = high_acceptance
        self.low_acceptance = low_acceptance

    def get_preferences(self, user_id: str) -> UserPreferences:
        return self.store.get_or_create(user_id)

    def current_threshold(self, user_id: str) -> float:
        """Threshold as stored right now. Callers must not cache it."""
        return self.store.get_or_create(user_id).confidence_threshold

    def update_preferences(self, user_id: str, patch: PreferencesPatch | dict) -> UserPreferences:
        """Apply an explicit preference change.

        Raises:
            ConfigurationError: unknown fields, out-of-range values, or
                bounds that would put min above max.
        """
        if not isinstance(patch, PreferencesPatch):
            try:
                patch = PreferencesPatch.model_validate(patch)
            except ValidationError as e:
                raise ConfigurationError(str(e)) from e

        if not patch.model_dump(exclude_unset=True, exclude_none=True):
            return self.get_preferences(user_id)

        prefs, _ = self.store.mutate(user_id, lambda p: p.apply(patch))
        logger.info(
            "preferences.updated",
            user_id=user_id,
            fields=sorted(patch.model_dump(exclude_unset=True)),
            version=prefs.version,
        )
        return prefs

    def record_outcome(
        self,
        user_id: str,
        item_type: str,
        action: OutcomeAction | str,
        confidence: float = DEFAULT_AVERAGE_CONFIDENCE,
    ) -> UserPreferences:
        """Count one accept/reject and fold the confidence into the running mean."""
        action, item_type = self._check_outcome(item_type, action)
        conf = clamp_confidence(confidence, DEFAULT_AVERAGE_CONFIDENCE)
        prefs, _ = self.store.mutate(
            user_id, lambda p: p.record_outcome(item_type, action, conf)
        )
        logger.info(
            "preferences.outcome_recorded",
            user_id=user_id,
            item_type=item_type,
            action=action.value,
            confidence=conf,
        )
        return prefs

    def auto_adjust(self, user_id: str) -> bool:
        """Re-derive the threshold from the global acceptance rate. True if it moved."""
        prefs, moved = self.store.mutate(user_id, self._adjust)
        if moved:
            logger.info(
                "preferences.threshold_adjusted",
                user_id=user_id,
                threshold=prefs.confidence_threshold,
                version=prefs.version,
            )
        return moved

    def track_interaction(
        self,
        user_id: str,
        item_type: str,
        action: OutcomeAction | str,
        confidence: float = DEFAULT_AVERAGE_CONFIDENCE,
    ) -> UserPreferences:
        """Outcome event handler: record, then auto-adjust, in one locked update."""
        action, item_type = self._check_outcome(item_type, action)
        conf = clamp_confidence(confidence, DEFAULT_AVERAGE_CONFIDENCE)

        def change(p: UserPreferences) -> bool:
            p.record_outcome(item_type, action, conf)
            return self._adjust(p)

        prefs, moved = self.store.mutate(user_id, change)
        logger.info(
            "preferences.interaction_tracked",
            user_id=user_id,
            item_type=item_type,
            action=action.value,
            confidence=conf,
            threshold_moved=moved,
        )
        return prefs

    def get_filters(self, user_id: str) -> dict:
        try:
            return self.get_preferences(user_id).suggestion_filters()
        except sqlite3.Error as e:
            logger.error("preferences.filters_failed", user_id=user_id, error=str(e))
            return UserPreferences(user_id=user_id).suggestion_filters()

    def get_acceptance_stats(self, user_id: str) -> dict:
        return self.get_preferences(user_id).acceptance_stats()

    def reset_preferences(self, user_id: str) -> UserPreferences:
        """Drop everything learned and start from defaults at version 1."""
        self.store.delete(user_id)
        prefs = self.store.get_or_create(user_id)
        logger.info("preferences.reset", user_id=user_id)
        return prefs

    def export_preferences(self, user_id: str) -> dict:
        prefs = self.get_preferences(user_id)
        return {
            "preferences": prefs.to_dict(),
            "stats": prefs.acceptance_stats(),
            "exported_at": datetime.now().isoformat(),
        }

    def prioritize_suggestions(self, suggestions: list[dict], user_id: str) -> list[dict]:
        """Keep allowed, relevant-enough suggestions, best first.

        Score is relevance blended with how often the user accepts that type.
        Suggestions without a numeric relevance in [0, 1] are dropped.
        """
        prefs = self.get_preferences(user_id)
        allowed = set(prefs.suggestion_types)
        kept = [
            s
            for s in suggestions
            if s.get("type") in allowed
            and is_valid_confidence(s.get("relevance"))
            and s["relevance"] >= prefs.confidence_threshold
        ]

        def score(s: dict) -> float:
            rate = prefs.acceptance_rate(s.get("type", ""))
            return float(s["relevance"]) * RELEVANCE_WEIGHT + rate * ACCEPTANCE_WEIGHT

        return sorted(kept, key=score, reverse=True)

    def _adjust(self, prefs: UserPreferences) -> bool:
        return prefs.auto_adjust(
            min_interactions=self.min_interactions,
            step=self.step,
            high=self.high_acceptance,
            low=self.low_acceptance,
        )

    @staticmethod
    def _check_outcome(item_type: str, action: OutcomeAction | str) -> tuple[OutcomeAction, str]:
        try:
            action = OutcomeAction(action)
        except ValueError:
            raise ValueError(f"Invalid action: {action}. Use: accepted, rejected") from None
        if item_type not in PATTERN_TYPES:
            raise ValueError(f"Invalid item type: {item_type}. Use: {', '.join(PATTERN_TYPES)}")
        return action, str(item_type)
