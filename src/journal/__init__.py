from .analysis import analyze_entry, analyze_sentiment, extract_keywords, summarize
from .entries import JournalEntries, JournalNotFoundError

__all__ = [
    "JournalEntries",
    "JournalNotFoundError",
    "analyze_entry",
    "analyze_sentiment",
    "extract_keywords",
    "summarize",
]
