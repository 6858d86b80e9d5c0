"""Shared CLI utilities."""

import json
import sys
from typing import Optional

import click
import structlog
from rich.console import Console

console = Console()
logger = structlog.get_logger()


def get_components(user_id: Optional[str] = None) -> dict:
    """Initialize stores and services for one local user from config."""
    from cli.config import get_user_paths, load_config_model
    from context import ContextAggregator
    from extraction import ConfidenceGate
    from journal import JournalEntries
    from preferences import PreferenceLearningEngine, PreferenceStore
    from records import RecordStore

    try:
        config = load_config_model()
    except ValueError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)

    user_id = user_id or config.cli.user_id
    paths = get_user_paths(config, user_id)

    records = RecordStore(paths["db"])
    engine = PreferenceLearningEngine(
        PreferenceStore(paths["db"]),
        min_interactions=config.learning.min_interactions,
        step=config.learning.step,
        high_acceptance=config.learning.high_acceptance,
        low_acceptance=config.learning.low_acceptance,
    )

    return {
        "config": config,
        "user_id": user_id,
        "paths": paths,
        "records": records,
        "journal": JournalEntries(records),
        "gate": ConfidenceGate(records),
        "engine": engine,
        "aggregator": ContextAggregator(records, engine, max_items=config.context.max_items),
    }


def read_extraction(source) -> dict:
    """Read extractor output (JSON, optionally fenced) from a click file."""
    from extraction import parse_extraction

    text = source.read()
    if not text.strip():
        raise click.ClickException("No input")
    return parse_extraction(text)


def dump_json(data) -> None:
    console.print_json(json.dumps(data, default=str))
