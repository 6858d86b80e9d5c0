"""CLI entry point for Steward."""

import click

from cli.commands import commit, context, feedback, journal, prefs, validate


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
def cli(verbose: bool, json_logs: bool):
    """Steward - journal extraction with learned confidence gating."""
    from cli.config import load_config_model
    from cli.logging_config import setup_logging

    try:
        config = load_config_model()
    except ValueError as e:
        raise click.ClickException(str(e))

    level = "DEBUG" if verbose else config.logging.level
    setup_logging(json_mode=json_logs or config.logging.json_mode, level=level)


cli.add_command(journal)
cli.add_command(validate)
cli.add_command(commit)
cli.add_command(prefs)
cli.add_command(feedback)
cli.add_command(context)


if __name__ == "__main__":
    cli()
