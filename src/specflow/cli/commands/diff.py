"""specflow diff -- compare two documents without touching the history."""

from __future__ import annotations

import json

import click

from specflow.cli.formatting import format_error, format_patch, get_console


@click.command()
@click.argument("before", type=click.Path(exists=True, dir_okay=False))
@click.argument("after", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the patch as JSON.")
def diff(before: str, after: str, as_json: bool) -> None:
    """Show the patch that turns BEFORE into AFTER."""
    from specflow.cli import _read_document
    from specflow.engine.diff import generate_patch
    from specflow.engine.impact import classify_impact

    console = get_console()
    try:
        patch = generate_patch(_read_document(before), _read_document(after))
        if as_json:
            click.echo(json.dumps(patch.to_dict(), indent=2, ensure_ascii=False))
        else:
            format_patch(patch, classify_impact(patch), console)
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None
