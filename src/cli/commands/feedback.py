"""Feedback CLI command: record an accept/reject outcome."""

import click
from rich.console import Console

from cli.utils import get_components

console = Console()


@click.command()
@click.argument("item_type", type=click.Choice(["mood", "todo", "media", "habit", "suggestion"]))
@click.argument("action", type=click.Choice(["accepted", "rejected"]))
@click.option("-c", "--confidence", type=float, default=0.7, help="Confidence of the item")
def feedback(item_type: str, action: str, confidence: float):
    """Record that a suggested ITEM_TYPE was ACTION by the user."""
    c = get_components()
    before = c["engine"].current_threshold(c["user_id"])
    p = c["engine"].track_interaction(c["user_id"], item_type, action, confidence)

    mark = "[green]✓[/]" if action == "accepted" else "[red]✗[/]"
    console.print(f"{mark} {item_type} {action}")
    if p.confidence_threshold != before:
        console.print(
            f"Threshold adjusted: {before:.2f} -> [bold]{p.confidence_threshold:.2f}[/]"
        )
