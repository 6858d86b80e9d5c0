"""Batch validation of a raw extraction result."""

import json
from typing import Any

import structlog

from shared_types import ItemType

from .models import BatchOutcome, ItemError
from .normalizer import is_valid_confidence, normalize

logger = structlog.get_logger()

_COLLECTIONS = (
    ("todos", ItemType.TODO, "Todo"),
    ("media", ItemType.MEDIA, "Media"),
    ("habits", ItemType.HABIT, "Habit"),
)


class MalformedBatchError(ValueError):
    """The extraction payload is not an object at all."""


def validate_batch(extracted: Any) -> BatchOutcome:
    """Run every candidate in an extraction through the normalizer.

    A bad item never discards the rest of the batch. Passing a BatchOutcome
    returns it untouched, so callers can validate defensively.
    """
    if isinstance(extracted, BatchOutcome):
        return extracted
    if extracted is None:
        extracted = {}
    if not isinstance(extracted, dict):
        raise MalformedBatchError("Extraction result must be an object")

    outcome = BatchOutcome()
    batch_conf = extracted.get("confidence")
    if is_valid_confidence(batch_conf):
        outcome.batch_confidence = float(batch_conf)

    mood = extracted.get("mood")
    if mood is not None and mood != "":
        result = normalize(ItemType.MOOD, mood)
        if result.valid:
            outcome.normalized.mood = result.normalized
        else:
            _reject(outcome, ItemType.MOOD, "Mood", None, result.errors)

    for key, item_type, label in _COLLECTIONS:
        items = extracted.get(key)
        if items is None:
            continue
        if not isinstance(items, list):
            _reject(outcome, item_type, label, None, [f"{key} must be a list"])
            continue

        target = getattr(outcome.normalized, key)
        for index, raw in enumerate(items):
            result = normalize(item_type, raw)
            if result.valid:
                target.append(result.normalized)
            else:
                _reject(outcome, item_type, label, index, result.errors)

    if outcome.errors:
        logger.info(
            "extraction.batch_invalid_items",
            rejected=len(outcome.rejected),
            accepted=len(outcome.normalized.items()),
        )
    return outcome


def _reject(
    outcome: BatchOutcome,
    item_type: ItemType,
    label: str,
    index: int | None,
    reasons: list[str],
) -> None:
    """Record one invalid item as a single error line."""
    reason = "; ".join(reasons)
    prefix = f"{label}: " if index is None else f"{label} {index + 1}: "
    outcome.errors.append(prefix + reason)
    outcome.rejected.append(ItemError(type=item_type, reason=reason, index=index))


def parse_extraction(response: str) -> dict:
    """Parse an LLM text response into a raw extraction dict.

    Tolerates markdown fences. Anything that is not a JSON object gives {}.
    """
    text = response.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[-1]
    if text.endswith("```"):
        text = text.rsplit("```", 1)[0]
    text = text.strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("extraction.parse_failed", response=text[:200])
        return {}

    if not isinstance(data, dict):
        logger.warning("extraction.not_an_object", kind=type(data).__name__)
        return {}
    return data
