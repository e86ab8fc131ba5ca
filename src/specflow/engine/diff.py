"""Diff generator: structured comparison between two agent collections.

Provides generate_patch() which compares two name-keyed collections and
returns a SpecPatch whose diffs are emitted in a fixed order:

1. removed agents (whole-entity, high impact)
2. added agents (whole-entity, high impact)
3. per-field changes for agents on both sides, fields in FIELD_ORDER

List fields are compared as sets of unique strings, so reordering a list
without changing its members produces no diffs.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Sequence

from specflow.models.agent import AgentSpec, index_by_name
from specflow.models.patch import (
    FIELD_ORDER,
    Author,
    DiffOperation,
    DiffPath,
    Impact,
    SpecDiff,
    SpecPatch,
)

logger = logging.getLogger(__name__)

NO_CHANGES_SUMMARY = "no changes"

# Default per-field impact; the classifier may escalate at patch level.
FIELD_IMPACT: dict[DiffPath, Impact] = {
    DiffPath.ROLE: Impact.MEDIUM,
    DiffPath.DISPLAY_NAME: Impact.LOW,
    DiffPath.CONSTRAINTS: Impact.MEDIUM,
    DiffPath.CAPABILITIES: Impact.LOW,
    DiffPath.CAN_SEND_TO: Impact.MEDIUM,
    DiffPath.CAN_RECEIVE_FROM: Impact.MEDIUM,
}

_NAME_MAX_CHARS = 50


def new_patch_id() -> str:
    return f"patch-{uuid.uuid4().hex[:12]}"


def new_diff_id() -> str:
    return f"diff-{uuid.uuid4().hex[:12]}"


def _make_diff(
    agent_name: str,
    path: DiffPath,
    operation: DiffOperation,
    *,
    before: object = None,
    after: object = None,
    impact: Impact,
) -> SpecDiff:
    return SpecDiff(
        id=new_diff_id(),
        agent_name=agent_name,
        operation=operation,
        path=path,
        before=before,
        after=after,
        impact=impact,
    )


def _set_field_diffs(
    agent_name: str,
    path: DiffPath,
    before: list[str],
    after: list[str],
) -> list[SpecDiff]:
    """Removals (in before's order) then additions (in after's order)."""
    impact = FIELD_IMPACT[path]
    before_set = set(before)
    after_set = set(after)
    diffs: list[SpecDiff] = []

    for item in dict.fromkeys(before):
        if item not in after_set:
            diffs.append(_make_diff(
                agent_name, path, DiffOperation.REMOVE, before=item, impact=impact,
            ))

    for item in dict.fromkeys(after):
        if item not in before_set:
            diffs.append(_make_diff(
                agent_name, path, DiffOperation.ADD, after=item, impact=impact,
            ))

    return diffs


def diff_agent_fields(before: AgentSpec, after: AgentSpec) -> list[SpecDiff]:
    """Field-level diffs for one agent present on both sides."""
    diffs: list[SpecDiff] = []
    for path in FIELD_ORDER:
        old = path.read(before)
        new = path.read(after)
        if path.is_scalar:
            if old != new:
                diffs.append(_make_diff(
                    after.name, path, DiffOperation.MODIFY,
                    before=old, after=new, impact=FIELD_IMPACT[path],
                ))
        else:
            diffs.extend(_set_field_diffs(after.name, path, old, new))  # type: ignore[arg-type]
    return diffs


def compute_diffs(
    before: Sequence[AgentSpec],
    after: Sequence[AgentSpec],
) -> list[SpecDiff]:
    """Compute the ordered diff list between two collections."""
    before_map = index_by_name(before)
    after_map = index_by_name(after)
    diffs: list[SpecDiff] = []

    for name, agent in before_map.items():
        if name not in after_map:
            diffs.append(_make_diff(
                name, DiffPath.ENTITY, DiffOperation.REMOVE,
                before=agent, impact=Impact.HIGH,
            ))

    for name, agent in after_map.items():
        if name not in before_map:
            diffs.append(_make_diff(
                name, DiffPath.ENTITY, DiffOperation.ADD,
                after=agent, impact=Impact.HIGH,
            ))

    for name, agent in after_map.items():
        old = before_map.get(name)
        if old is not None:
            diffs.extend(diff_agent_fields(old, agent))

    return diffs


def summarize(diffs: Sequence[SpecDiff]) -> str:
    """Human-readable one-line summary of a diff list.

    Lists added and removed agents by name, then the number of field
    changes and the agents they touch.
    """
    if not diffs:
        return NO_CHANGES_SUMMARY

    added = [d.agent_name for d in diffs if d.path is DiffPath.ENTITY and d.operation is DiffOperation.ADD]
    removed = [d.agent_name for d in diffs if d.path is DiffPath.ENTITY and d.operation is DiffOperation.REMOVE]
    field_changes = [d for d in diffs if d.path is not DiffPath.ENTITY]

    parts: list[str] = []
    if added:
        parts.append(f"Added {', '.join(added)}")
    if removed:
        parts.append(f"Removed {', '.join(removed)}")
    if field_changes:
        agents = list(dict.fromkeys(d.agent_name for d in field_changes))
        parts.append(f"Modified {len(field_changes)} field(s) on {', '.join(agents)}")

    return " / ".join(parts)


def generate_patch(
    before: Sequence[AgentSpec],
    after: Sequence[AgentSpec],
    *,
    name: str | None = None,
    author: Author = Author.HUMAN,
    rationale: str | None = None,
) -> SpecPatch:
    """Compute a SpecPatch that turns *before* into *after*.

    Args:
        before: Collection before the edit.
        after: Collection after the edit.
        name: Patch name. Defaults to the first 50 characters of the summary.
        author: Who made the edit.
        rationale: Optional free-text reason for the edit.

    Returns:
        A SpecPatch, possibly with zero diffs (see is_patch_empty()).
    """
    diffs = compute_diffs(before, after)
    summary = summarize(diffs)
    patch = SpecPatch(
        id=new_patch_id(),
        name=name or summary[:_NAME_MAX_CHARS],
        created_at=datetime.now(timezone.utc),
        author=author,
        diffs=diffs,
        summary=summary,
        rationale=rationale,
    )
    logger.debug("Generated %s: %s", patch.id, summary)
    return patch
