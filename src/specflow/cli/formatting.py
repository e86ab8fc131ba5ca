"""Rich formatting helpers for the specflow CLI.

Provides functions that format SDK data structures for terminal display.
Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from specflow.models.agent import AgentSpec

if TYPE_CHECKING:
    from specflow.models.patch import Impact, SpecDiff, SpecPatch
    from specflow.operations.history import HistoryResult, LogEntry, StatusInfo

_IMPACT_STYLES = {"low": "green", "medium": "yellow", "high": "red"}

_BOUNDARY_MESSAGES = {
    "nothing_to_commit": "Nothing to commit.",
    "boundary_reached": "Nothing to {verb}.",
    "not_found": "No such patch.",
}


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def _impact_markup(impact: Impact) -> str:
    style = _IMPACT_STYLES[impact.value]
    return f"[{style}]{impact.value}[/{style}]"


def format_log(entries: Sequence[LogEntry], console: Console) -> None:
    """Display the patch log, oldest first, marking the cursor."""
    if not entries:
        console.print("[dim]No patches.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("", width=1)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Id", style="yellow")
    table.add_column("Time", style="dim")
    table.add_column("Author", style="cyan")
    table.add_column("Impact")
    table.add_column("Diffs", justify="right")
    table.add_column("Name")

    for entry in entries:
        patch = entry.patch
        name = escape(patch.name)
        if not entry.applied:
            name = f"[dim]{name}[/dim]"
        table.add_row(
            "*" if entry.is_current else "",
            str(entry.index),
            patch.id,
            patch.created_at.strftime("%Y-%m-%d %H:%M"),
            patch.author.value,
            _impact_markup(entry.impact),
            str(len(patch.diffs)),
            name,
        )

    console.print(table)


def format_status(info: StatusInfo, console: Console) -> None:
    """Display cursor position and checkpoint layout."""
    console.print(f"History [green]{escape(info.history_id)}[/green]")
    if info.patch_count == 0:
        console.print("[dim]No patches yet.[/dim]")
        return

    if info.current_patch is None:
        console.print("  At:          [yellow]baseline[/yellow]")
    else:
        console.print(
            f"  At:          [yellow]{info.current_patch.id}[/yellow] "
            f"{escape(info.current_patch.name)}"
        )
    console.print(f"  Applied:     {info.current_index + 1} / {info.patch_count}")
    console.print(f"  Undo / redo: {'yes' if info.can_undo else 'no'} / {'yes' if info.can_redo else 'no'}")
    if info.checkpoint_indices:
        console.print(f"  Checkpoints: {', '.join(str(i) for i in info.checkpoint_indices)}")
    else:
        console.print("  Checkpoints: [dim]none[/dim]")


def _format_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, AgentSpec):
        return f"<agent {value.name}>"
    return repr(value)


def format_diff_line(diff: SpecDiff) -> str:
    """One colored line per diff."""
    target = escape(f"{diff.agent_name}.{diff.path.value}") if not diff.path.is_entity else escape(diff.agent_name)
    op = diff.operation.value
    if op == "add":
        return f"[green]+ {target}[/green] {escape(_format_value(diff.after))}"
    if op == "remove":
        return f"[red]- {target}[/red] {escape(_format_value(diff.before))}"
    return (
        f"[yellow]~ {target}[/yellow] "
        f"{escape(_format_value(diff.before))} -> {escape(_format_value(diff.after))}"
    )


def format_patch(patch: SpecPatch, impact: Impact, console: Console) -> None:
    """Display a patch header, its diffs, and its impact."""
    console.print(
        f"patch [yellow]{patch.id}[/yellow] {escape(patch.name)} "
        f"({_impact_markup(impact)} impact)"
    )
    if not patch.diffs:
        console.print(f"[dim]{escape(patch.summary)}[/dim]")
        return
    for diff in patch.diffs:
        console.print(format_diff_line(diff), highlight=False)
    console.print()
    console.print(escape(patch.summary))


def format_agents(agents: Sequence[AgentSpec], console: Console) -> None:
    """Display a collection as a table."""
    if not agents:
        console.print("[dim]No agents.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name", style="yellow")
    table.add_column("Display name")
    table.add_column("Role")
    table.add_column("Capabilities", justify="right")
    table.add_column("Constraints", justify="right")
    table.add_column("Sends to")

    for agent in agents:
        table.add_row(
            escape(agent.name),
            escape(agent.display_name),
            escape(agent.role),
            str(len(agent.capabilities)),
            str(len(agent.constraints)),
            escape(", ".join(agent.communication.can_send_to)),
        )

    console.print(table)


def format_result(result: HistoryResult, console: Console, *, verb: str) -> None:
    """Report a navigation/commit outcome.

    Non-OK outcomes are informational, not errors.
    """
    if not result.ok:
        message = _BOUNDARY_MESSAGES[result.status.value].format(verb=verb)
        console.print(f"[dim]{message}[/dim]")
    if result.warning:
        console.print(f"[yellow]Warning:[/yellow] {escape(result.warning)}", highlight=False)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
