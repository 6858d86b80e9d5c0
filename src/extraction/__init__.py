"""Candidate extraction pipeline: normalize, validate, gate by confidence."""

from .gate import CONFIDENCE_REASON, ConfidenceGate
from .models import (
    BatchOutcome,
    CandidateHabit,
    CandidateMedia,
    CandidateMood,
    CandidateTodo,
    CommitResult,
    ItemError,
    ItemResult,
    NormalizeResult,
)
from .normalizer import clamp_confidence, confidence_level, filter_by_confidence, normalize
from .validator import MalformedBatchError, parse_extraction, validate_batch

__all__ = [
    "BatchOutcome",
    "CandidateHabit",
    "CandidateMedia",
    "CandidateMood",
    "CandidateTodo",
    "CommitResult",
    "ConfidenceGate",
    "CONFIDENCE_REASON",
    "ItemError",
    "ItemResult",
    "MalformedBatchError",
    "NormalizeResult",
    "clamp_confidence",
    "confidence_level",
    "filter_by_confidence",
    "normalize",
    "parse_extraction",
    "validate_batch",
]
