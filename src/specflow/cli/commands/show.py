"""specflow show -- print the collection at the current position."""

from __future__ import annotations

import click

from specflow.cli.formatting import format_agents


@click.command()
@click.option("--yaml", "as_yaml", is_flag=True, help="Print the collection as Spec-Kit YAML.")
@click.pass_context
def show(ctx: click.Context, as_yaml: bool) -> None:
    """Rebuild and print the current collection."""
    from specflow.cli import _history_session
    from specflow.codec import dump_collection

    with _history_session(ctx) as (h, console):
        agents = h.get_current_state()
        if as_yaml:
            click.echo(dump_collection(agents), nl=False)
        else:
            format_agents(agents, console)
