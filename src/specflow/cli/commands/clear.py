"""specflow clear -- drop the whole history."""

from __future__ import annotations

import click

from specflow.cli.formatting import format_error, format_result, get_console


@click.command()
@click.option("--force", is_flag=True, help="Required: clearing cannot be undone.")
@click.pass_context
def clear(ctx: click.Context, force: bool) -> None:
    """Remove every patch, checkpoint, and the baseline."""
    from specflow.cli import _history_session

    if not force:
        format_error("Clearing history requires --force flag.", get_console())
        raise SystemExit(1)

    with _history_session(ctx) as (h, console):
        dropped = len(h.patches)
        result = h.clear()
        console.print(f"Cleared [red]{dropped}[/red] patches")
        format_result(result, console, verb="clear")
