"""specflow init -- record the baseline collection."""

from __future__ import annotations

import click

from specflow.cli.formatting import format_result


@click.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def init(ctx: click.Context, document: str) -> None:
    """Set DOCUMENT as the baseline of an empty history.

    Has no effect once patches have been committed.
    """
    from specflow.cli import _history_session, _read_document

    with _history_session(ctx) as (h, console):
        agents = _read_document(document)
        if h.patches:
            console.print(
                f"[dim]History already has {len(h.patches)} patches; baseline unchanged.[/dim]"
            )
            return
        result = h.initialize(agents)
        console.print(f"Baseline set: [green]{len(agents)}[/green] agents")
        format_result(result, console, verb="initialize")
