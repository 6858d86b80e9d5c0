"""Per-user preference model and the learning rules that mutate it."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared_types import ItemType, OutcomeAction, PromptStyle, SuggestionType

DEFAULT_SUGGESTION_TYPES = [SuggestionType.MOOD, SuggestionType.REFLECTION, SuggestionType.TODO]
DEFAULT_TOPICS = ["productivity", "wellness", "creativity"]
DEFAULT_THRESHOLD = 0.7
DEFAULT_MIN_THRESHOLD = 0.3
DEFAULT_MAX_THRESHOLD = 0.95
DEFAULT_AVERAGE_CONFIDENCE = 0.7

# Follow-up suggestions are tracked alongside the four candidate kinds
SUGGESTION_PATTERN = "suggestion"
PATTERN_TYPES = [t.value for t in ItemType] + [SUGGESTION_PATTERN]

# Auto-adjust tuning
MIN_INTERACTIONS = 10
ADJUST_STEP = 0.05
HIGH_ACCEPTANCE = 0.8
LOW_ACCEPTANCE = 0.4


class ConfigurationError(ValueError):
    """Preference values that would break the threshold bounds."""


@dataclass
class AcceptancePattern:
    accepted: int = 0
    rejected: int = 0
    average_confidence: float = DEFAULT_AVERAGE_CONFIDENCE

    @property
    def total(self) -> int:
        return self.accepted + self.rejected

    @property
    def acceptance_rate(self) -> float | None:
        return self.accepted / self.total if self.total else None

    def record(self, action: OutcomeAction, confidence: float) -> None:
        if action == OutcomeAction.ACCEPTED:
            self.accepted += 1
            # Incremental mean over accepted confidences only
            self.average_confidence += (confidence - self.average_confidence) / self.accepted
        else:
            self.rejected += 1

    def to_dict(self) -> dict:
        return {
            "accepted": self.accepted,
            "rejected": self.rejected,
            "average_confidence": self.average_confidence,
        }


def _default_patterns() -> dict[str, AcceptancePattern]:
    return {name: AcceptancePattern() for name in PATTERN_TYPES}


@dataclass
class UserPreferences:
    user_id: str
    suggestion_types: list[str] = field(
        default_factory=lambda: [t.value for t in DEFAULT_SUGGESTION_TYPES]
    )
    confidence_threshold: float = DEFAULT_THRESHOLD
    prompt_style: str = PromptStyle.REFLECTIVE.value
    topics_of_interest: list[str] = field(default_factory=lambda: list(DEFAULT_TOPICS))
    acceptance_patterns: dict[str, AcceptancePattern] = field(default_factory=_default_patterns)
    auto_adjust_threshold: bool = True
    min_confidence_threshold: float = DEFAULT_MIN_THRESHOLD
    max_confidence_threshold: float = DEFAULT_MAX_THRESHOLD
    version: int = 1
    last_updated: datetime = field(default_factory=datetime.now)
    created_at: datetime = field(default_factory=datetime.now)

    # --- learning ---

    def record_outcome(self, item_type: str, action: OutcomeAction, confidence: float) -> None:
        """Update counters for one accept/reject. Does not touch version."""
        pattern = self.acceptance_patterns.setdefault(item_type, AcceptancePattern())
        pattern.record(OutcomeAction(action), confidence)
        self.last_updated = datetime.now()

    def totals(self) -> tuple[int, int]:
        accepted = sum(p.accepted for p in self.acceptance_patterns.values())
        rejected = sum(p.rejected for p in self.acceptance_patterns.values())
        return accepted, rejected

    def auto_adjust(
        self,
        min_interactions: int = MIN_INTERACTIONS,
        step: float = ADJUST_STEP,
        high: float = HIGH_ACCEPTANCE,
        low: float = LOW_ACCEPTANCE,
    ) -> bool:
        """Nudge the threshold from the global acceptance rate.

        Rates above ``high`` lower it, below ``low`` raise it, anything in
        between is left alone. Returns True if the threshold moved.
        """
        if not self.auto_adjust_threshold:
            return False

        accepted, rejected = self.totals()
        total = accepted + rejected
        if total < min_interactions:
            return False

        rate = accepted / total
        current = self.confidence_threshold
        if rate > high and current > self.min_confidence_threshold:
            new = max(self.min_confidence_threshold, current - step)
        elif rate < low and current < self.max_confidence_threshold:
            new = min(self.max_confidence_threshold, current + step)
        else:
            return False

        self.confidence_threshold = round(new, 4)
        self.version += 1
        self.last_updated = datetime.now()
        return True

    def acceptance_rate(self, item_type: str) -> float:
        """Acceptance rate for one type; 0.5 when there is no data."""
        pattern = self.acceptance_patterns.get(item_type)
        if pattern is None or pattern.acceptance_rate is None:
            return 0.5
        return pattern.acceptance_rate

    def suggestion_filters(self) -> dict:
        return {
            "types": list(self.suggestion_types),
            "confidence_threshold": self.confidence_threshold,
            "prompt_style": self.prompt_style,
            "topics_of_interest": list(self.topics_of_interest),
            "acceptance_patterns": {k: p.to_dict() for k, p in self.acceptance_patterns.items()},
        }

    def acceptance_stats(self) -> dict:
        stats = {}
        for item_type, pattern in self.acceptance_patterns.items():
            stats[item_type] = {
                "accepted": pattern.accepted,
                "rejected": pattern.rejected,
                "total": pattern.total,
                "acceptance_rate": pattern.acceptance_rate or 0.0,
                "average_confidence": pattern.average_confidence,
            }
        return {
            "stats": stats,
            "current_threshold": self.confidence_threshold,
            "auto_adjust": self.auto_adjust_threshold,
            "version": self.version,
            "last_updated": self.last_updated.isoformat(),
        }

    # --- explicit changes ---

    def apply(self, patch: "PreferencesPatch") -> None:
        """Apply an allow-listed patch, keeping min <= threshold <= max.

        An explicit threshold outside the (new) bounds is an error. When only
        the bounds change, the stored threshold is pulled inside them.
        """
        changes = {
            k: v for k, v in patch.model_dump(exclude_unset=True, mode="json").items() if v is not None
        }
        if not changes:
            return
        new_min = changes.get("min_confidence_threshold", self.min_confidence_threshold)
        new_max = changes.get("max_confidence_threshold", self.max_confidence_threshold)
        if new_min > new_max:
            raise ConfigurationError(
                f"min_confidence_threshold ({new_min}) cannot exceed "
                f"max_confidence_threshold ({new_max})"
            )

        threshold = changes.get("confidence_threshold")
        if threshold is not None and not new_min <= threshold <= new_max:
            raise ConfigurationError(
                f"confidence_threshold ({threshold}) must be within [{new_min}, {new_max}]"
            )
        if threshold is None:
            threshold = min(new_max, max(new_min, self.confidence_threshold))

        for key, value in changes.items():
            setattr(self, key, value)
        self.min_confidence_threshold = new_min
        self.max_confidence_threshold = new_max
        self.confidence_threshold = threshold
        self.version += 1
        self.last_updated = datetime.now()

    # --- serialization ---

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "suggestion_types": list(self.suggestion_types),
            "confidence_threshold": self.confidence_threshold,
            "prompt_style": self.prompt_style,
            "topics_of_interest": list(self.topics_of_interest),
            "acceptance_patterns": {k: p.to_dict() for k, p in self.acceptance_patterns.items()},
            "auto_adjust_threshold": self.auto_adjust_threshold,
            "min_confidence_threshold": self.min_confidence_threshold,
            "max_confidence_threshold": self.max_confidence_threshold,
            "version": self.version,
            "last_updated": self.last_updated.isoformat(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "UserPreferences":
        patterns = _default_patterns()
        for name, raw in (d.get("acceptance_patterns") or {}).items():
            patterns[name] = AcceptancePattern(
                accepted=int(raw.get("accepted", 0)),
                rejected=int(raw.get("rejected", 0)),
                average_confidence=float(
                    raw.get("average_confidence", DEFAULT_AVERAGE_CONFIDENCE)
                ),
            )
        last_updated = d.get("last_updated")
        created_at = d.get("created_at")
        return cls(
            user_id=d["user_id"],
            suggestion_types=list(d.get("suggestion_types") or []),
            confidence_threshold=float(d.get("confidence_threshold", DEFAULT_THRESHOLD)),
            prompt_style=d.get("prompt_style", PromptStyle.REFLECTIVE.value),
            topics_of_interest=list(d.get("topics_of_interest") or []),
            acceptance_patterns=patterns,
            auto_adjust_threshold=bool(d.get("auto_adjust_threshold", True)),
            min_confidence_threshold=float(
                d.get("min_confidence_threshold", DEFAULT_MIN_THRESHOLD)
            ),
            max_confidence_threshold=float(
                d.get("max_confidence_threshold", DEFAULT_MAX_THRESHOLD)
            ),
            version=int(d.get("version", 1)),
            last_updated=datetime.fromisoformat(last_updated) if last_updated else datetime.now(),
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(),
        )


class PreferencesPatch(BaseModel):
    """The only fields a caller may change directly. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    suggestion_types: Optional[list[SuggestionType]] = None
    confidence_threshold: Optional[float] = Field(None, ge=0.0, le=1.0)
    prompt_style: Optional[PromptStyle] = None
    topics_of_interest: Optional[list[str]] = None
    auto_adjust_threshold: Optional[bool] = None
    min_confidence_threshold: Optional[float] = Field(None, ge=0.0, le=1.0)
    max_confidence_threshold: Optional[float] = Field(None, ge=0.0, le=1.0)

    @field_validator("suggestion_types")
    @classmethod
    def dedupe_types(cls, v: Optional[list[SuggestionType]]) -> Optional[list[SuggestionType]]:
        if v is None:
            return v
        return list(dict.fromkeys(v))

    @field_validator("topics_of_interest")
    @classmethod
    def clean_topics(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        return [t.strip() for t in v if t and t.strip()]
