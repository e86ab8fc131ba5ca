"""Diff and patch domain models for specflow.

SpecDiff is one atomic change to an agent field or to a whole agent.
SpecPatch is an ordered, named group of diffs that represents one
committed edit. Both are plain data: serializing a patch with
``model_dump(mode="json", by_alias=True)`` yields the value handed to
sync collaborators.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field

from specflow.models.agent import AgentSpec

# Diff payloads: a whole AgentSpec for entity-level diffs, a string otherwise.
DiffValue = Union[AgentSpec, str]


class DiffOperation(str, enum.Enum):
    """Kind of change a diff describes."""

    ADD = "add"
    REMOVE = "remove"
    MODIFY = "modify"

    def inverse(self) -> DiffOperation:
        if self is DiffOperation.ADD:
            return DiffOperation.REMOVE
        if self is DiffOperation.REMOVE:
            return DiffOperation.ADD
        return DiffOperation.MODIFY

    def __repr__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class DiffPath(str, enum.Enum):
    """Closed set of addressable locations inside a collection.

    ENTITY addresses a whole agent. Every other member addresses one field
    and is either scalar (replaced by ``modify``) or set-like (changed one
    member at a time by ``add``/``remove``).
    """

    ENTITY = "entity"
    ROLE = "role"
    DISPLAY_NAME = "displayName"
    CONSTRAINTS = "constraints"
    CAPABILITIES = "capabilities"
    CAN_SEND_TO = "communication.canSendTo"
    CAN_RECEIVE_FROM = "communication.canReceiveFrom"

    @property
    def is_entity(self) -> bool:
        return self is DiffPath.ENTITY

    @property
    def is_scalar(self) -> bool:
        return self in SCALAR_PATHS

    @property
    def is_set(self) -> bool:
        return self in SET_PATHS

    def read(self, agent: AgentSpec) -> str | list[str]:
        """Return the current value of this field on *agent*."""
        if self is DiffPath.ROLE:
            return agent.role
        if self is DiffPath.DISPLAY_NAME:
            return agent.display_name
        if self is DiffPath.CONSTRAINTS:
            return agent.constraints
        if self is DiffPath.CAPABILITIES:
            return agent.capabilities
        if self is DiffPath.CAN_SEND_TO:
            return agent.communication.can_send_to
        if self is DiffPath.CAN_RECEIVE_FROM:
            return agent.communication.can_receive_from
        raise ValueError(f"{self.value!r} does not address a field")

    def write(self, agent: AgentSpec, value: str | list[str]) -> AgentSpec:
        """Return a copy of *agent* with this field set to *value*."""
        if self is DiffPath.ROLE:
            return agent.model_copy(update={"role": value})
        if self is DiffPath.DISPLAY_NAME:
            return agent.model_copy(update={"display_name": value})
        if self is DiffPath.CONSTRAINTS:
            return agent.model_copy(update={"constraints": value})
        if self is DiffPath.CAPABILITIES:
            return agent.model_copy(update={"capabilities": value})
        if self is DiffPath.CAN_SEND_TO:
            comm = agent.communication.model_copy(update={"can_send_to": value})
            return agent.model_copy(update={"communication": comm})
        if self is DiffPath.CAN_RECEIVE_FROM:
            comm = agent.communication.model_copy(update={"can_receive_from": value})
            return agent.model_copy(update={"communication": comm})
        raise ValueError(f"{self.value!r} does not address a field")

    def __repr__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


SCALAR_PATHS: frozenset[DiffPath] = frozenset({DiffPath.ROLE, DiffPath.DISPLAY_NAME})
SET_PATHS: frozenset[DiffPath] = frozenset({
    DiffPath.CONSTRAINTS,
    DiffPath.CAPABILITIES,
    DiffPath.CAN_SEND_TO,
    DiffPath.CAN_RECEIVE_FROM,
})

# Fixed field comparison order for agents present on both sides of a diff.
FIELD_ORDER: tuple[DiffPath, ...] = (
    DiffPath.ROLE,
    DiffPath.DISPLAY_NAME,
    DiffPath.CONSTRAINTS,
    DiffPath.CAPABILITIES,
    DiffPath.CAN_SEND_TO,
    DiffPath.CAN_RECEIVE_FROM,
)


class Impact(str, enum.Enum):
    """Severity of a diff or a whole patch."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value


class Author(str, enum.Enum):
    """Who produced a patch."""

    HUMAN = "human"
    AI = "ai"
    SYSTEM = "system"

    def __str__(self) -> str:
        return self.value


class SpecDiff(BaseModel):
    """One atomic change.

    ``before`` is absent for additions and ``after`` for removals.
    """

    model_config = {"populate_by_name": True, "frozen": True}

    id: str
    agent_name: str = Field(alias="agentName")
    operation: DiffOperation
    path: DiffPath
    before: Optional[DiffValue] = None
    after: Optional[DiffValue] = None
    impact: Impact = Impact.LOW

    def inverted(self) -> SpecDiff:
        """The diff that undoes this one: operation flipped, values swapped."""
        return self.model_copy(update={
            "operation": self.operation.inverse(),
            "before": self.after,
            "after": self.before,
        })

    def __repr__(self) -> str:
        return f"SpecDiff({self.operation.value} {self.agent_name}:{self.path.value})"


class SpecPatch(BaseModel):
    """An ordered, named group of diffs representing one committed edit."""

    model_config = {"populate_by_name": True, "frozen": True}

    id: str
    name: str
    created_at: datetime = Field(alias="createdAt")
    author: Author = Author.HUMAN
    diffs: list[SpecDiff] = Field(default_factory=list)
    summary: str = ""
    rationale: Optional[str] = None
    applied_at: Optional[datetime] = Field(default=None, alias="appliedAt")

    @property
    def agent_names(self) -> list[str]:
        """Distinct agent names touched by this patch, in diff order."""
        return list(dict.fromkeys(d.agent_name for d in self.diffs))

    def to_dict(self) -> dict:
        """Fully serializable form used for persistence and sync hand-off."""
        return self.model_dump(mode="json", by_alias=True)

    def __str__(self) -> str:
        name = self.name
        if len(name) > 60:
            name = name[:57] + "..."
        return f"{self.id} {name}"

    def __repr__(self) -> str:
        return f"SpecPatch({self.id} {len(self.diffs)} diffs {self.name!r})"
