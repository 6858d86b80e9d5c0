"""Context CLI command: show what the extractor would be told."""

import asyncio

import click
from rich.console import Console
from rich.table import Table

from cli.utils import dump_json, get_components

console = Console()


@click.command()
@click.option("-d", "--days", type=click.IntRange(1, 365), default=None, help="Lookback days")
@click.option("--lite", is_flag=True, help="Only current mood, todo count and keywords")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def context(days: int | None, lite: bool, as_json: bool):
    """Summarize recent moods, todos, media, habits and journal themes."""
    from context import summarize_context

    c = get_components()
    aggregator = c["aggregator"]
    user_id = c["user_id"]

    if lite:
        dump_json(asyncio.run(aggregator.get_lightweight_context(user_id)))
        return

    days = days or c["config"].context.days
    bundle = asyncio.run(aggregator.get_user_context(user_id, days=days))

    if as_json:
        dump_json(bundle.to_dict())
        return

    if bundle.fallback:
        console.print("[yellow]No data could be read; showing generic context.[/]")
    elif bundle.degraded:
        console.print(f"[yellow]Partial context, failed reads:[/] {', '.join(bundle.degraded)}")

    if bundle.habit_progress:
        table = Table(title=f"Habits - last {days} days")
        table.add_column("Habit")
        table.add_column("Today")
        table.add_column("Streak", justify="right")
        table.add_column("Rate", justify="right")
        for h in bundle.habit_progress:
            table.add_row(
                h["name"],
                h["status"],
                str(h["streak"]),
                f"{h.get('completion_rate', 0):.0%}",
            )
        console.print(table)

    console.print(summarize_context(bundle) or "[dim]Nothing recorded yet.[/]")
