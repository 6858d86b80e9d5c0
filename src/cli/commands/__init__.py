"""CLI command modules."""

from .context import context
from .extraction import commit, validate
from .feedback import feedback
from .journal import journal
from .prefs import prefs

__all__ = [
    "commit",
    "context",
    "feedback",
    "journal",
    "prefs",
    "validate",
]
