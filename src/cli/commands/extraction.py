"""Extraction CLI commands: validate and commit extractor output."""

import sys

import click
from rich.console import Console
from rich.table import Table

from cli.utils import dump_json, get_components, read_extraction

console = Console()

LEVEL_STYLE = {
    "Very High": "green",
    "High": "green",
    "Medium": "yellow",
    "Low": "red",
    "Very Low": "red",
}


def _label(item_type, candidate) -> str:
    if item_type == "mood":
        return candidate.value
    return getattr(candidate, "title", None) or getattr(candidate, "name", "")


@click.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option("--json", "as_json", is_flag=True, help="Print the normalized batch as JSON")
def validate(source, as_json: bool):
    """Validate extractor output without saving anything.

    SOURCE is a JSON file (markdown fences allowed), or - for stdin.
    """
    from extraction import MalformedBatchError, confidence_level, validate_batch

    raw = read_extraction(source)
    try:
        outcome = validate_batch(raw)
    except MalformedBatchError as e:
        raise click.ClickException(str(e))

    if as_json:
        dump_json(outcome.to_dict())
    else:
        items = outcome.normalized.items()
        if items:
            table = Table(title="Normalized candidates")
            table.add_column("Type", width=6)
            table.add_column("Item")
            table.add_column("Conf", justify="right", width=5)
            table.add_column("Level", width=9)
            for item_type, _, candidate in items:
                level = confidence_level(candidate.confidence)
                table.add_row(
                    item_type.value,
                    _label(item_type, candidate)[:60],
                    f"{candidate.confidence:.2f}",
                    f"[{LEVEL_STYLE.get(level, 'dim')}]{level}[/]",
                )
            console.print(table)
        else:
            console.print("[yellow]No valid candidates.[/]")

        for err in outcome.errors:
            console.print(f"[red]✗[/] {err}")

    if not outcome.is_valid:
        sys.exit(1)


@click.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option("-j", "--journal-id", default=None, help="Journal entry the items came from")
@click.option(
    "-t",
    "--threshold",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Override the learned confidence threshold",
)
@click.option("--json", "as_json", is_flag=True, help="Print the commit result as JSON")
def commit(source, journal_id: str | None, threshold: float | None, as_json: bool):
    """Save extractor output that clears the confidence threshold."""
    from extraction import MalformedBatchError
    from journal import JournalNotFoundError

    raw = read_extraction(source)
    c = get_components()
    user_id = c["user_id"]

    journal = None
    if journal_id:
        try:
            journal = c["journal"].get(user_id, journal_id)
        except JournalNotFoundError as e:
            raise click.ClickException(str(e))

    if threshold is None:
        threshold = c["engine"].current_threshold(user_id)

    try:
        result = c["gate"].commit(user_id, raw, threshold, journal=journal)
    except MalformedBatchError as e:
        raise click.ClickException(str(e))

    if as_json:
        dump_json(result.to_dict())
        return

    saved = result.saved_items
    console.print(
        f"Saved {saved.count()} item(s) at threshold {threshold:.2f}"
        + (" [yellow](partial)[/]" if result.partial_success else "")
    )
    if saved.mood:
        console.print(f"  [green]✓[/] mood: {saved.mood['mood']}")
    for todo in saved.todos:
        console.print(f"  [green]✓[/] todo: {todo['title']}")
    for media in saved.media:
        console.print(f"  [green]✓[/] media: {media['title']}")
    for habit in saved.habits:
        console.print(f"  [green]✓[/] habit: {habit['name']}")

    if result.errors:
        table = Table(title="Not saved")
        table.add_column("Type", width=6)
        table.add_column("Kind", width=11)
        table.add_column("Reason")
        for err in result.errors:
            table.add_row(err.type.value, err.kind.value, err.reason)
        console.print(table)
