"""specflow log -- show patch history."""

from __future__ import annotations

import click

from specflow.cli.formatting import format_log


@click.command()
@click.option("-n", "--limit", default=None, type=int, help="Show only the newest N patches.")
@click.pass_context
def log(ctx: click.Context, limit: int | None) -> None:
    """Show patches oldest first; '*' marks the current position."""
    from specflow.cli import _history_session

    with _history_session(ctx) as (h, console):
        entries = h.log()
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        format_log(entries, console)
