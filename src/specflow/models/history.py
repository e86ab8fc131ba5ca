"""History state models for specflow.

HistoryState is the complete, serializable value persisted after every
mutating call. It is frozen: transitions in ``specflow.operations.history``
build a new state rather than editing one in place.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from specflow.models.agent import AgentSpec
from specflow.models.patch import SpecPatch


class Checkpoint(BaseModel):
    """Full snapshot of the collection right after ``patches[patch_index]``."""

    model_config = {"populate_by_name": True, "frozen": True}

    patch_index: int = Field(alias="patchIndex")
    snapshot: list[AgentSpec] = Field(default_factory=list)


class HistoryState(BaseModel):
    """Linear patch history with a movable cursor and sparse checkpoints.

    Attributes:
        patches: Committed patches, oldest first.
        current_index: Index of the most recently applied patch, or -1
            when sitting on the baseline.
        baseline: Collection before any patch in this history.
        checkpoints: Snapshots ordered by strictly increasing patch_index.
    """

    model_config = {"populate_by_name": True, "frozen": True}

    patches: list[SpecPatch] = Field(default_factory=list)
    current_index: int = Field(default=-1, alias="currentIndex")
    baseline: list[AgentSpec] = Field(default_factory=list)
    checkpoints: list[Checkpoint] = Field(default_factory=list)

    @property
    def last_index(self) -> int:
        return len(self.patches) - 1

    @property
    def can_undo(self) -> bool:
        return self.current_index >= 0

    @property
    def can_redo(self) -> bool:
        return self.current_index < self.last_index

    def find_patch_index(self, patch_id: str) -> int:
        """Position of the patch with *patch_id*, or -1 if absent."""
        for i, patch in enumerate(self.patches):
            if patch.id == patch_id:
                return i
        return -1

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, data: str | bytes) -> HistoryState:
        return cls.model_validate_json(data)

    def __str__(self) -> str:
        return (
            f"{len(self.patches)} patches @ {self.current_index} | "
            f"{len(self.checkpoints)} checkpoints"
        )
