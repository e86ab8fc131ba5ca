"""specflow undo / redo / revert -- move through the history."""

from __future__ import annotations

import click
from rich.markup import escape

from specflow.cli.formatting import format_result


def _report_position(h, console) -> None:  # type: ignore[no-untyped-def]
    info = h.status()
    if info.current_patch is None:
        console.print("Now at [yellow]baseline[/yellow]")
    else:
        console.print(f"Now at [yellow]{info.current_patch.id}[/yellow] {escape(info.current_patch.name)}")


@click.command()
@click.pass_context
def undo(ctx: click.Context) -> None:
    """Step back one patch."""
    from specflow.cli import _history_session

    with _history_session(ctx) as (h, console):
        result = h.undo()
        if result.ok:
            _report_position(h, console)
        format_result(result, console, verb="undo")


@click.command()
@click.pass_context
def redo(ctx: click.Context) -> None:
    """Step forward one patch."""
    from specflow.cli import _history_session

    with _history_session(ctx) as (h, console):
        result = h.redo()
        if result.ok:
            _report_position(h, console)
        format_result(result, console, verb="redo")


@click.command()
@click.argument("patch_id")
@click.pass_context
def revert(ctx: click.Context, patch_id: str) -> None:
    """Move to the state right after PATCH_ID.

    Later patches stay available to redo until the next commit.
    """
    from specflow.cli import _history_session

    with _history_session(ctx) as (h, console):
        result = h.revert_to(patch_id)
        if result.ok:
            _report_position(h, console)
        format_result(result, console, verb="revert")
