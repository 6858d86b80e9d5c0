"""Data models for AI-extracted candidates and commit outcomes."""

from dataclasses import asdict, dataclass, field
from typing import Any, Generic, TypeVar, Union

from shared_types import ErrorKind, ItemType

T = TypeVar("T")

NO_REASONING = "No reasoning provided"
STRING_MOOD_REASONING = "Default confidence for string format"


@dataclass
class CandidateMood:
    value: str
    confidence: float = 0.5
    reasoning: str = NO_REASONING

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CandidateTodo:
    title: str
    time: str = "future"
    priority: str | None = "medium"
    due_date: str | None = None
    confidence: float = 0.7
    reasoning: str = NO_REASONING

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CandidateMedia:
    title: str
    type: str | None = None
    status: str = "planned"
    confidence: float = 0.7
    reasoning: str = NO_REASONING

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CandidateHabit:
    name: str
    status: str = "done"
    frequency: str | None = "daily"
    confidence: float = 0.7
    reasoning: str = NO_REASONING

    def to_dict(self) -> dict:
        return asdict(self)


Candidate = Union[CandidateMood, CandidateTodo, CandidateMedia, CandidateHabit]


@dataclass
class NormalizeResult:
    """Outcome of normalizing one raw candidate.

    ``normalized`` may be set even when ``valid`` is False: it is the
    canonical form the checks ran against.
    """

    valid: bool
    errors: list[str] = field(default_factory=list)
    normalized: Candidate | None = None


@dataclass
class ItemError:
    """A single candidate that did not get committed."""

    type: ItemType
    reason: str
    kind: ErrorKind = ErrorKind.VALIDATION
    index: int | None = None
    confidence: float | None = None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "type": self.type.value,
            "reason": self.reason,
            "kind": self.kind.value,
        }
        if self.index is not None:
            d["index"] = self.index
        if self.confidence is not None:
            d["confidence"] = self.confidence
        return d


@dataclass
class NormalizedBatch:
    mood: CandidateMood | None = None
    todos: list[CandidateTodo] = field(default_factory=list)
    media: list[CandidateMedia] = field(default_factory=list)
    habits: list[CandidateHabit] = field(default_factory=list)

    def items(self) -> list[tuple[ItemType, int, Candidate]]:
        """All candidates in commit order, tagged with kind and position."""
        out: list[tuple[ItemType, int, Candidate]] = []
        if self.mood is not None:
            out.append((ItemType.MOOD, 0, self.mood))
        out.extend((ItemType.TODO, i, t) for i, t in enumerate(self.todos))
        out.extend((ItemType.MEDIA, i, m) for i, m in enumerate(self.media))
        out.extend((ItemType.HABIT, i, h) for i, h in enumerate(self.habits))
        return out

    def to_dict(self) -> dict:
        return {
            "mood": self.mood.to_dict() if self.mood else None,
            "todos": [t.to_dict() for t in self.todos],
            "media": [m.to_dict() for m in self.media],
            "habits": [h.to_dict() for h in self.habits],
        }


@dataclass
class BatchOutcome:
    """Validated view of one extraction batch.

    Every input item lands in exactly one of ``normalized`` or ``rejected``;
    ``errors`` holds the human-readable line for each rejected item.
    """

    normalized: NormalizedBatch = field(default_factory=NormalizedBatch)
    errors: list[str] = field(default_factory=list)
    rejected: list[ItemError] = field(default_factory=list)
    batch_confidence: float | None = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "normalized": self.normalized.to_dict(),
            "errors": list(self.errors),
            "batch_confidence": self.batch_confidence,
        }


@dataclass
class ItemResult(Generic[T]):
    """Explicit success/failure for one persisted item."""

    item_type: ItemType
    value: T | None = None
    error: ItemError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, item_type: ItemType, value: T) -> "ItemResult[T]":
        return cls(item_type=item_type, value=value)

    @classmethod
    def failure(cls, item_type: ItemType, error: ItemError) -> "ItemResult[T]":
        return cls(item_type=item_type, error=error)


@dataclass
class SavedItems:
    mood: dict | None = None
    todos: list[dict] = field(default_factory=list)
    media: list[dict] = field(default_factory=list)
    habits: list[dict] = field(default_factory=list)

    def add(self, item_type: ItemType, record: dict) -> None:
        if item_type == ItemType.MOOD:
            self.mood = record
        elif item_type == ItemType.TODO:
            self.todos.append(record)
        elif item_type == ItemType.MEDIA:
            self.media.append(record)
        else:
            self.habits.append(record)

    def count(self) -> int:
        return (1 if self.mood else 0) + len(self.todos) + len(self.media) + len(self.habits)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CommitResult:
    saved_items: SavedItems = field(default_factory=SavedItems)
    errors: list[ItemError] = field(default_factory=list)

    @property
    def partial_success(self) -> bool:
        return self.saved_items.count() > 0 and len(self.errors) > 0

    def errors_of(self, kind: ErrorKind) -> list[ItemError]:
        return [e for e in self.errors if e.kind == kind]

    def to_dict(self) -> dict:
        return {
            "saved_items": self.saved_items.to_dict(),
            "errors": [e.to_dict() for e in self.errors],
            "partial_success": self.partial_success,
        }
