"""Lexical analysis of journal text: sentiment and keywords.

Stored on each journal record so context aggregation can report keywords
and a sentiment label without another model call.
"""

import re
from collections import Counter

_WORD_RE = re.compile(r"\b[a-z][a-z']+\b")

_POSITIVE = {
    "great", "good", "excellent", "happy", "excited", "proud", "accomplished",
    "calm", "relaxed", "rested", "energized", "grateful", "thankful", "loved",
    "enjoyed", "enjoy", "fun", "peaceful", "productive", "motivated", "hopeful",
    "content", "cheerful", "refreshed", "confident", "progress", "finished",
    "laughed", "inspired", "satisfied", "better", "glad",
}

_NEGATIVE = {
    "bad", "terrible", "sad", "frustrated", "stressed", "anxious", "overwhelmed",
    "exhausted", "tired", "lonely", "angry", "annoyed", "worried", "upset",
    "drained", "sick", "awful", "hopeless", "disappointed", "irritated",
    "nervous", "behind", "missed", "skipped", "procrastinated", "stuck",
    "burnout", "cried", "worse", "restless", "bored",
}

_STOPWORDS = {
    "the", "and", "for", "that", "this", "with", "was", "were", "have", "has",
    "had", "but", "not", "are", "you", "your", "all", "any", "can", "will",
    "just", "from", "they", "them", "then", "than", "there", "their", "what",
    "when", "which", "who", "about", "into", "out", "over", "some", "very",
    "really", "today", "yesterday", "tomorrow", "got", "get", "did", "didn't",
    "also", "been", "being", "after", "before", "again", "more", "most", "much",
    "our", "its", "it's", "i'm", "i've", "we", "she", "him", "her", "his",
    "would", "could", "should", "maybe", "still", "even", "like", "one", "two",
    "day", "time", "lot", "bit", "went", "going", "made", "make", "feel", "felt",
}


def analyze_sentiment(text: str) -> dict:
    """Score text by counting positive and negative words.

    Returns:
        {score: float (-1 to 1), label: Positive|Negative|Mixed|Neutral,
         positive_count: int, negative_count: int}
    """
    words = set(_WORD_RE.findall(text.lower()))
    pos = len(words & _POSITIVE)
    neg = len(words & _NEGATIVE)
    total = pos + neg

    if total == 0:
        score = 0.0
        label = "Neutral"
    else:
        score = (pos - neg) / total
        if score > 0.2:
            label = "Positive"
        elif score < -0.2:
            label = "Negative"
        else:
            label = "Mixed"

    return {
        "score": round(score, 2),
        "label": label,
        "positive_count": pos,
        "negative_count": neg,
    }


def extract_keywords(text: str, limit: int = 8) -> list[str]:
    """Most frequent content words, ties broken by first appearance."""
    words = [
        w.strip("'")
        for w in _WORD_RE.findall(text.lower())
        if len(w) > 3 and w not in _STOPWORDS
    ]
    counts = Counter(words)
    first_seen = {w: i for i, w in reversed(list(enumerate(words)))}
    ranked = sorted(counts, key=lambda w: (-counts[w], first_seen[w]))
    return ranked[:limit]


def summarize(text: str, max_chars: int = 160) -> str:
    """First sentence, trimmed to max_chars."""
    stripped = " ".join(text.split())
    if not stripped:
        return ""
    first = re.split(r"(?<=[.!?])\s", stripped, maxsplit=1)[0]
    if len(first) <= max_chars:
        return first
    return first[: max_chars - 3].rstrip() + "..."


def analyze_entry(text: str) -> dict:
    """Everything stored under a journal record's ``analysis`` key."""
    sentiment = analyze_sentiment(text)
    return {
        "keywords": extract_keywords(text),
        "sentiment": sentiment["label"],
        "sentiment_score": sentiment["score"],
        "summary": summarize(text),
    }
