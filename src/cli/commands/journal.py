"""Journal CLI commands: add and list entries."""

import click
from rich.console import Console
from rich.table import Table

from cli.utils import get_components

console = Console()


@click.group()
def journal():
    """Manage journal entries."""
    pass


@journal.command("add")
@click.option("--title", help="Entry title (defaults to date)")
@click.option("-c", "--category", default="daily", help="Entry category")
@click.option("--tags", help="Comma-separated tags")
@click.option("--energy", type=click.Choice(["low", "medium", "high"]), default=None)
@click.argument("content", required=False)
def journal_add(title: str, category: str, tags: str, energy: str, content: str):
    """Add new journal entry. Opens editor if no content provided."""
    if not content:
        content = click.edit("# Write your entry here\n\n")
        if not content:
            console.print("[yellow]No content provided, cancelled.[/]")
            return

    c = get_components()
    tag_list = [t.strip() for t in tags.split(",")] if tags else []
    try:
        entry = c["journal"].create(
            c["user_id"],
            content,
            title=title,
            category=category,
            tags=tag_list,
            energy=energy,
        )
    except ValueError as e:
        raise click.ClickException(str(e))

    analysis = entry.get("analysis") or {}
    console.print(f"[green]Created:[/] {entry.id}  {entry.get('title')}")
    console.print(
        f"Sentiment: {analysis.get('sentiment')}  |  "
        f"Keywords: {', '.join(analysis.get('keywords') or []) or '-'}"
    )


@journal.command("list")
@click.option("-c", "--category", help="Filter by category")
@click.option("-n", "--limit", default=10, help="Max entries to show")
def journal_list(category: str, limit: int):
    """List recent journal entries."""
    c = get_components()
    entries = c["journal"].list_entries(c["user_id"], category=category, limit=limit)

    if not entries:
        console.print("[yellow]No entries found.[/]")
        return

    table = Table(show_header=True)
    table.add_column("ID", style="dim", width=16)
    table.add_column("Date", width=10)
    table.add_column("Category", width=10)
    table.add_column("Title")
    table.add_column("Mood", width=8)

    for e in entries:
        table.add_row(
            e.id,
            e.created_at.strftime("%Y-%m-%d"),
            e.get("category", ""),
            e.get("title", ""),
            (e.get("analysis") or {}).get("sentiment", ""),
        )
    console.print(table)
