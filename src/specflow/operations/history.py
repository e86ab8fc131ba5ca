"""History operations: pure state transitions over HistoryState.

Every function here takes a HistoryState and returns a new one (plus a
HistoryResult describing the outcome) without touching storage. The
History facade composes these with persistence and event delivery.

Rebuilding a state starts from the nearest checkpoint at or before the
target and replays at most ``checkpoint_interval`` patches, so navigation
cost does not grow with the length of the history.
"""
from __future__ import annotations

import bisect
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

from specflow.engine.impact import classify_impact
from specflow.engine.patch import apply_patch, is_patch_empty
from specflow.models.agent import AgentSpec
from specflow.models.history import Checkpoint, HistoryState
from specflow.models.patch import Impact, SpecPatch

logger = logging.getLogger(__name__)


class HistoryStatus(str, enum.Enum):
    """Outcome of a history operation."""

    OK = "ok"
    NOTHING_TO_COMMIT = "nothing_to_commit"
    BOUNDARY_REACHED = "boundary_reached"
    NOT_FOUND = "not_found"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HistoryResult:
    """Outcome of a History call.

    Attributes:
        status: OK, or the reason nothing happened.
        agents: Collection at the resulting position. None when the call
            did not move the cursor (boundary, not found, nothing to commit).
        patch: The committed patch (commit only).
        impact: Classified impact of the committed patch (commit only).
        warning: Set when the transition succeeded in memory but could not
            be persisted.
    """

    status: HistoryStatus
    agents: list[AgentSpec] | None = None
    patch: SpecPatch | None = None
    impact: Impact | None = None
    warning: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is HistoryStatus.OK


@dataclass(frozen=True)
class LogEntry:
    """One row of History.log()."""

    index: int
    patch: SpecPatch
    impact: Impact
    applied: bool
    is_current: bool

    def __str__(self) -> str:
        marker = "*" if self.is_current else " "
        return f"{marker} {self.index:>3} {self.patch.id} [{self.impact.value}] {self.patch.name}"


@dataclass(frozen=True)
class StatusInfo:
    """Snapshot of the cursor and checkpoint layout returned by History.status().

    Attributes:
        history_id: Identifier the state is persisted under.
        patch_count: Number of committed patches (reachable or not via redo).
        current_index: Cursor position, -1 for the baseline.
        can_undo: Whether undo() would move the cursor.
        can_redo: Whether redo() would move the cursor.
        checkpoint_indices: patch_index of every stored checkpoint.
        current_patch: The most recently applied patch, if any.
    """

    history_id: str
    patch_count: int
    current_index: int
    can_undo: bool
    can_redo: bool
    checkpoint_indices: list[int] = field(default_factory=list)
    current_patch: SpecPatch | None = None

    def __str__(self) -> str:
        head = self.current_patch.id if self.current_patch else "baseline"
        return (
            f"{self.history_id} @ {head} | {self.current_index + 1}/{self.patch_count} applied"
            f" | {len(self.checkpoint_indices)} checkpoints"
        )


# ------------------------------------------------------------------
# Rebuild
# ------------------------------------------------------------------

def find_checkpoint(state: HistoryState, target_index: int) -> Checkpoint | None:
    """Checkpoint with the greatest patch_index <= target_index, if any."""
    pos = bisect.bisect_right(state.checkpoints, target_index, key=lambda cp: cp.patch_index)
    if pos == 0:
        return None
    return state.checkpoints[pos - 1]


def replay(
    start: Sequence[AgentSpec],
    patches: Sequence[SpecPatch],
    start_index: int,
    target_index: int,
) -> list[AgentSpec]:
    """Apply ``patches[start_index..target_index]`` (inclusive) to *start*."""
    agents = list(start)
    for i in range(start_index, min(target_index, len(patches) - 1) + 1):
        agents = apply_patch(agents, patches[i])
    return agents


def rebuild(state: HistoryState, target_index: int) -> list[AgentSpec]:
    """Reconstruct the collection right after ``patches[target_index]``.

    ``target_index == -1`` yields the baseline.
    """
    checkpoint = find_checkpoint(state, target_index)
    if checkpoint is None:
        start, start_index = state.baseline, 0
    else:
        start, start_index = checkpoint.snapshot, checkpoint.patch_index + 1
    logger.debug(
        "Rebuild to %d from %s (%d patches to replay)",
        target_index,
        f"checkpoint {checkpoint.patch_index}" if checkpoint else "baseline",
        max(0, target_index - start_index + 1),
    )
    return replay(start, state.patches, start_index, target_index)


def rebuild_linear(state: HistoryState, target_index: int) -> list[AgentSpec]:
    """Reconstruct by replaying from the baseline, ignoring checkpoints."""
    return replay(state.baseline, state.patches, 0, target_index)


# ------------------------------------------------------------------
# Transitions
# ------------------------------------------------------------------

def initialize(state: HistoryState, agents: Sequence[AgentSpec]) -> HistoryState:
    """Set the baseline, unless the history already has patches."""
    if state.patches:
        logger.debug("History already has %d patches; baseline kept", len(state.patches))
        return state
    return state.model_copy(update={"baseline": list(agents)})


def commit(
    state: HistoryState,
    patch: SpecPatch,
    after: Sequence[AgentSpec],
    *,
    checkpoint_interval: int,
) -> tuple[HistoryState, HistoryResult]:
    """Append *patch* at the cursor, dropping any redo branch.

    Args:
        state: Current history.
        patch: Patch produced by the diff generator.
        after: Collection the editor produced; returned in the result.
        checkpoint_interval: A checkpoint is recorded when the new index is a
            positive multiple of this value. Its snapshot is the replayed
            state after the patch, so checkpointed and linear rebuilds agree.

    Returns:
        (new_state, result). An empty patch leaves the state unchanged and
        reports NOTHING_TO_COMMIT.
    """
    if is_patch_empty(patch):
        return state, HistoryResult(status=HistoryStatus.NOTHING_TO_COMMIT)

    old_index = state.current_index
    dropped = len(state.patches) - (old_index + 1)
    applied = patch.model_copy(update={"applied_at": datetime.now(timezone.utc)})
    patches = state.patches[: old_index + 1] + [applied]
    new_index = len(patches) - 1

    checkpoints = [cp for cp in state.checkpoints if cp.patch_index <= old_index]
    if new_index > 0 and new_index % checkpoint_interval == 0:
        snapshot = apply_patch(rebuild(state, old_index), applied)
        checkpoints.append(Checkpoint(patch_index=new_index, snapshot=snapshot))
        logger.debug("Checkpoint recorded at patch %d", new_index)

    if dropped:
        logger.debug("Commit truncated %d unreachable patches", dropped)

    new_state = state.model_copy(update={
        "patches": patches,
        "current_index": new_index,
        "checkpoints": checkpoints,
    })
    result = HistoryResult(
        status=HistoryStatus.OK,
        agents=list(after),
        patch=applied,
        impact=classify_impact(applied),
    )
    return new_state, result


def move_to(state: HistoryState, target_index: int) -> tuple[HistoryState, HistoryResult]:
    """Move the cursor to *target_index* and rebuild the collection there."""
    agents = rebuild(state, target_index)
    new_state = state.model_copy(update={"current_index": target_index})
    return new_state, HistoryResult(status=HistoryStatus.OK, agents=agents)


def undo(state: HistoryState) -> tuple[HistoryState, HistoryResult]:
    if state.current_index < 0:
        return state, HistoryResult(status=HistoryStatus.BOUNDARY_REACHED)
    return move_to(state, state.current_index - 1)


def redo(state: HistoryState) -> tuple[HistoryState, HistoryResult]:
    if state.current_index >= state.last_index:
        return state, HistoryResult(status=HistoryStatus.BOUNDARY_REACHED)
    return move_to(state, state.current_index + 1)


def revert_to(state: HistoryState, patch_id: str) -> tuple[HistoryState, HistoryResult]:
    """Move the cursor to the patch with *patch_id*. Does not truncate."""
    target = state.find_patch_index(patch_id)
    if target == -1:
        return state, HistoryResult(status=HistoryStatus.NOT_FOUND)
    return move_to(state, target)


def log_entries(state: HistoryState) -> list[LogEntry]:
    """All patches, oldest first, flagged by whether they are applied."""
    return [
        LogEntry(
            index=i,
            patch=patch,
            impact=classify_impact(patch),
            applied=i <= state.current_index,
            is_current=i == state.current_index,
        )
        for i, patch in enumerate(state.patches)
    ]
