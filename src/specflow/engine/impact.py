"""Impact classifier: assigns a severity to a whole patch.

Constraint edits are safety-relevant and always escalate to HIGH,
regardless of how many agents the patch touches.
"""
from __future__ import annotations

from specflow.models.patch import DiffPath, Impact, SpecPatch

_HIGH_PATHS = frozenset({DiffPath.CONSTRAINTS})
_MEDIUM_PATHS = frozenset({DiffPath.ROLE, DiffPath.CAPABILITIES})


def classify_impact(patch: SpecPatch) -> Impact:
    """Classify *patch* as low, medium or high impact.

    Precedence:
        HIGH   -- any constraints diff, more than 2 distinct agents, or any
                  diff already carrying HIGH impact.
        MEDIUM -- any role or capabilities diff, or more than 1 distinct agent.
        LOW    -- everything else (including an empty patch).
    """
    agent_count = len(patch.agent_names)

    if (
        any(d.path in _HIGH_PATHS for d in patch.diffs)
        or agent_count > 2
        or any(d.impact is Impact.HIGH for d in patch.diffs)
    ):
        return Impact.HIGH

    if any(d.path in _MEDIUM_PATHS for d in patch.diffs) or agent_count > 1:
        return Impact.MEDIUM

    return Impact.LOW
