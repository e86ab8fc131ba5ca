"""specflow commit -- record the changes in a document as a patch."""

from __future__ import annotations

import click

from specflow.cli.formatting import format_patch, format_result


@click.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option("-m", "--name", default=None, help="Patch name (defaults to the summary).")
@click.option(
    "--author",
    default=None,
    type=click.Choice(["human", "ai", "system"], case_sensitive=False),
    help="Who made the change.",
)
@click.option("--rationale", default=None, help="Why the change was made.")
@click.pass_context
def commit(
    ctx: click.Context,
    document: str,
    name: str | None,
    author: str | None,
    rationale: str | None,
) -> None:
    """Diff DOCUMENT against the current state and commit the result."""
    from specflow.cli import _history_session, _read_document
    from specflow.models.patch import Author

    with _history_session(ctx) as (h, console):
        after = _read_document(document)
        before = h.get_current_state()
        result = h.commit(
            before,
            after,
            name,
            author=Author(author.lower()) if author else None,
            rationale=rationale,
        )
        if result.ok and result.patch is not None and result.impact is not None:
            format_patch(result.patch, result.impact, console)
        format_result(result, console, verb="commit")
