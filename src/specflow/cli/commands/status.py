"""specflow status -- show the current position."""

from __future__ import annotations

import click

from specflow.cli.formatting import format_status


@click.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the current patch, undo/redo availability, and checkpoints."""
    from specflow.cli import _history_session

    with _history_session(ctx) as (h, console):
        format_status(h.status(), console)
