"""specflow CLI -- terminal interface for agent spec history.

This module is NEVER imported from specflow/__init__.py.
It is only loaded via the ``specflow`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install specflow[cli]"
    ) from None

from rich.markup import escape

from specflow.cli.formatting import format_error, get_console

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console

    from specflow.history import History


@click.group()
@click.option(
    "--db",
    default=".specflow.db",
    envvar="SPECFLOW_DB",
    help="Path to history database.",
)
@click.option(
    "--history-id",
    default="default",
    envvar="SPECFLOW_HISTORY_ID",
    help="Which history in the database to use.",
)
@click.option(
    "--checkpoint-interval",
    default=10,
    type=click.IntRange(min=1),
    envvar="SPECFLOW_CHECKPOINT_INTERVAL",
    help="Take a full snapshot every N commits.",
)
@click.pass_context
def cli(ctx: click.Context, db: str, history_id: str, checkpoint_interval: int) -> None:
    """specflow: undo/redo history for agent spec collections."""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db
    ctx.obj["history_id"] = history_id
    ctx.obj["checkpoint_interval"] = checkpoint_interval


def _get_history(ctx: click.Context) -> "History":  # noqa: F821 (forward ref)
    """Open a History instance from Click context."""
    from specflow.history import History
    from specflow.models.config import HistoryConfig

    config = HistoryConfig(
        db_path=ctx.obj["db_path"],
        history_id=ctx.obj["history_id"],
        checkpoint_interval=ctx.obj["checkpoint_interval"],
    )
    return History.open(config=config)


@contextmanager
def _history_session(ctx: click.Context) -> Iterator[tuple[History, Console]]:
    """Open a History, yield (history, console), and handle cleanup.

    Ensures the history is closed on exit and formats exceptions as CLI errors.
    """
    console = get_console()
    try:
        h = _get_history(ctx)
        try:
            if h.load_warning:
                console.print(f"[yellow]Warning:[/yellow] {escape(h.load_warning)}", highlight=False)
            yield h, console
        finally:
            h.close()
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


def _read_document(path: str) -> list:
    """Read and parse a Spec-Kit YAML agent file."""
    from pathlib import Path

    from specflow.codec import load_collection

    return load_collection(Path(path).read_text(encoding="utf-8"))


# Register subcommands after cli group is defined
from specflow.cli.commands.init import init  # noqa: E402
from specflow.cli.commands.commit import commit  # noqa: E402
from specflow.cli.commands.log import log  # noqa: E402
from specflow.cli.commands.status import status  # noqa: E402
from specflow.cli.commands.show import show  # noqa: E402
from specflow.cli.commands.navigate import redo, revert, undo  # noqa: E402
from specflow.cli.commands.diff import diff  # noqa: E402
from specflow.cli.commands.clear import clear  # noqa: E402

cli.add_command(init)
cli.add_command(commit)
cli.add_command(log)
cli.add_command(status)
cli.add_command(show)
cli.add_command(undo)
cli.add_command(redo)
cli.add_command(revert)
cli.add_command(diff)
cli.add_command(clear)
