"""Preference CLI commands: show, set, reset, stats, export."""

import click
from rich.console import Console
from rich.table import Table

from cli.utils import dump_json, get_components

console = Console()


def _split(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [v.strip() for v in value.split(",") if v.strip()]


@click.group()
def prefs():
    """Suggestion preferences and the learned confidence threshold."""
    pass


@prefs.command("show")
def prefs_show():
    """Show current preferences."""
    c = get_components()
    p = c["engine"].get_preferences(c["user_id"])

    table = Table(show_header=False, title=f"Preferences ({c['user_id']}, v{p.version})")
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("Threshold", f"{p.confidence_threshold:.2f}")
    table.add_row("Bounds", f"{p.min_confidence_threshold:.2f} - {p.max_confidence_threshold:.2f}")
    table.add_row("Auto-adjust", "on" if p.auto_adjust_threshold else "off")
    table.add_row("Suggestion types", ", ".join(p.suggestion_types))
    table.add_row("Prompt style", p.prompt_style)
    table.add_row("Topics", ", ".join(p.topics_of_interest))
    table.add_row("Last updated", p.last_updated.isoformat(timespec="seconds"))
    console.print(table)


@prefs.command("set")
@click.option("--threshold", type=float, help="Confidence threshold (0-1)")
@click.option("--min", "min_threshold", type=float, help="Lower bound for auto-adjust")
@click.option("--max", "max_threshold", type=float, help="Upper bound for auto-adjust")
@click.option("--auto-adjust/--no-auto-adjust", default=None, help="Learn threshold from feedback")
@click.option("--types", help="Comma-separated suggestion types")
@click.option("--style", help="Prompt style")
@click.option("--topics", help="Comma-separated topics of interest")
def prefs_set(threshold, min_threshold, max_threshold, auto_adjust, types, style, topics):
    """Update one or more preference fields."""
    from preferences import ConfigurationError

    patch = {
        "confidence_threshold": threshold,
        "min_confidence_threshold": min_threshold,
        "max_confidence_threshold": max_threshold,
        "auto_adjust_threshold": auto_adjust,
        "suggestion_types": _split(types),
        "prompt_style": style,
        "topics_of_interest": _split(topics),
    }
    patch = {k: v for k, v in patch.items() if v is not None}
    if not patch:
        raise click.UsageError("Nothing to update. Pass at least one option.")

    c = get_components()
    try:
        p = c["engine"].update_preferences(c["user_id"], patch)
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    console.print(
        f"[green]Updated[/] {', '.join(sorted(patch))} "
        f"(threshold {p.confidence_threshold:.2f}, v{p.version})"
    )


@prefs.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def prefs_reset(yes: bool):
    """Forget learned preferences and restore defaults."""
    if not yes:
        click.confirm("Reset all preferences and acceptance history?", abort=True)
    c = get_components()
    p = c["engine"].reset_preferences(c["user_id"])
    console.print(f"Preferences reset. Threshold {p.confidence_threshold:.2f}")


@prefs.command("stats")
def prefs_stats():
    """Acceptance rates per item type."""
    c = get_components()
    stats = c["engine"].get_acceptance_stats(c["user_id"])

    table = Table(title="Acceptance")
    table.add_column("Type")
    table.add_column("Accepted", justify="right")
    table.add_column("Rejected", justify="right")
    table.add_column("Rate", justify="right")
    table.add_column("Avg conf", justify="right")
    accepted = total = 0
    for item_type, s in stats["stats"].items():
        accepted += s["accepted"]
        total += s["total"]
        table.add_row(
            item_type,
            str(s["accepted"]),
            str(s["rejected"]),
            f"{s['acceptance_rate']:.0%}" if s["total"] else "-",
            f"{s['average_confidence']:.2f}",
        )
    console.print(table)

    overall = f"{accepted / total:.0%}" if total else "-"
    console.print(
        f"\n[bold]Overall:[/] {overall}  |  Interactions: {total}"
        f"  |  Threshold: {stats['current_threshold']:.2f}"
        f" (auto-adjust {'on' if stats['auto_adjust'] else 'off'})"
    )


@prefs.command("export")
def prefs_export():
    """Dump preferences and stats as JSON."""
    c = get_components()
    dump_json(c["engine"].export_preferences(c["user_id"]))
