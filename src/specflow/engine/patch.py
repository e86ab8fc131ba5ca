"""Patch applier and reverter.

Pure functions that replay or invert a SpecPatch over a collection.
Input collections are never mutated; each call returns a new list.

Set-field and collision policy:

- adding an agent whose name already exists replaces that agent in place,
  so a collection stays name-unique;
- adding a value that a set field already holds is skipped;
- removing a value from a set field drops every copy of it, matching the
  generator, which emits one removal per distinct value.

Diffs that address an agent not present in the collection are no-ops.
"""
from __future__ import annotations

import logging
from typing import Sequence

from specflow.engine.diff import compute_diffs
from specflow.models.agent import AgentSpec
from specflow.models.patch import DiffOperation, DiffPath, SpecDiff, SpecPatch

logger = logging.getLogger(__name__)


def is_patch_empty(patch: SpecPatch) -> bool:
    """True iff the patch carries no diffs."""
    return len(patch.diffs) == 0


def _apply_entity_diff(agents: list[AgentSpec], diff: SpecDiff) -> list[AgentSpec]:
    if diff.operation is DiffOperation.ADD:
        if not isinstance(diff.after, AgentSpec):
            logger.debug("Skipping entity add without agent payload: %s", diff.id)
            return agents
        for i, existing in enumerate(agents):
            if existing.name == diff.after.name:
                logger.debug("Agent %s already present; replacing in place", existing.name)
                return agents[:i] + [diff.after] + agents[i + 1:]
        return agents + [diff.after]

    if diff.operation is DiffOperation.REMOVE:
        return [a for a in agents if a.name != diff.agent_name]

    logger.debug("Ignoring modify on whole entity: %s", diff.id)
    return agents


def _apply_set_value(values: list[str], diff: SpecDiff) -> list[str]:
    if diff.operation is DiffOperation.ADD:
        if diff.after is None or diff.after in values:
            return values
        return values + [diff.after]  # type: ignore[list-item]

    if diff.operation is DiffOperation.REMOVE:
        if diff.before in values:
            return [v for v in values if v != diff.before]
        return values

    # A set field has no single value to modify.
    return values


def _apply_field_diff(agent: AgentSpec, diff: SpecDiff) -> AgentSpec:
    path = diff.path
    if path.is_scalar:
        if diff.operation is DiffOperation.MODIFY:
            return path.write(agent, diff.after if diff.after is not None else "")
        return agent

    current = path.read(agent)
    updated = _apply_set_value(current, diff)  # type: ignore[arg-type]
    if updated is current:
        return agent
    return path.write(agent, updated)


def apply_diff(agents: Sequence[AgentSpec], diff: SpecDiff) -> list[AgentSpec]:
    """Apply a single diff, returning a new collection."""
    result = list(agents)
    if diff.path is DiffPath.ENTITY:
        return _apply_entity_diff(result, diff)

    for i, agent in enumerate(result):
        if agent.name == diff.agent_name:
            result[i] = _apply_field_diff(agent, diff)
            return result

    logger.debug("Agent %s not found; diff %s is a no-op", diff.agent_name, diff.id)
    return result


def apply_patch(agents: Sequence[AgentSpec], patch: SpecPatch) -> list[AgentSpec]:
    """Replay every diff of *patch* over *agents*, in order.

    Returns:
        A new collection; *agents* is left untouched.
    """
    result = list(agents)
    for diff in patch.diffs:
        result = apply_diff(result, diff)
    return result


def invert_patch(patch: SpecPatch) -> SpecPatch:
    """Return the patch that undoes *patch*.

    Diff order is reversed and every diff is inverted (add <-> remove,
    before/after swapped). Ids and metadata are kept.
    """
    return patch.model_copy(update={
        "diffs": [d.inverted() for d in reversed(patch.diffs)],
    })


def revert_patch(agents: Sequence[AgentSpec], patch: SpecPatch) -> list[AgentSpec]:
    """Undo *patch* on a collection it was previously applied to.

    ``revert_patch(apply_patch(c, p), p)`` has no diffs against ``c``. Set
    members and agents restored by a revert are appended, so list order
    may differ from the original.
    """
    return apply_patch(agents, invert_patch(patch))


def collections_equivalent(a: Sequence[AgentSpec], b: Sequence[AgentSpec]) -> bool:
    """True when the diff generator sees no change between *a* and *b*.

    Ignores agent order and list order within set fields.
    """
    return not compute_diffs(a, b)
