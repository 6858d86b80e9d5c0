"""Context aggregation for journal analysis."""

from .aggregator import ContextAggregator, ContextBundle, fallback_context, summarize_context

__all__ = ["ContextAggregator", "ContextBundle", "fallback_context", "summarize_context"]
