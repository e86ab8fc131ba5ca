"""Agent document model for specflow.

AgentSpec is one record of the edited collection, keyed by ``name``.
A collection is a plain ``list[AgentSpec]``; the engine never mutates one
in place.

Serialization uses the camelCase keys of the agent document format
(``displayName``, ``canSendTo``, ``canReceiveFrom``) while Python code
uses snake_case attributes.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Sequence

from pydantic import BaseModel, Field

from specflow.exceptions import DuplicateAgentError

logger = logging.getLogger(__name__)


class Communication(BaseModel):
    """Which agents this agent may message, and hear from."""

    model_config = {"populate_by_name": True, "frozen": True}

    can_send_to: list[str] = Field(default_factory=list, alias="canSendTo")
    can_receive_from: list[str] = Field(default_factory=list, alias="canReceiveFrom")


class AgentSpec(BaseModel):
    """A single agent record.

    List fields are compared as sets when diffing, but their order is kept
    as-is when patches are replayed.
    """

    model_config = {"populate_by_name": True, "frozen": True}

    name: str
    display_name: str = Field(default="", alias="displayName")
    role: str = ""
    capabilities: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    communication: Communication = Field(default_factory=Communication)

    def __repr__(self) -> str:
        return f"AgentSpec({self.name!r})"

    def to_dict(self) -> dict:
        """Serialize using document (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


def index_by_name(agents: Sequence[AgentSpec]) -> dict[str, AgentSpec]:
    """Map agent name -> agent, preserving collection order.

    If a name repeats, the last occurrence wins and a warning is logged.
    """
    duplicates = find_duplicate_names(agents)
    if duplicates:
        logger.warning("Collection has duplicate agent names: %s", ", ".join(duplicates))
    return {agent.name: agent for agent in agents}


def find_duplicate_names(agents: Sequence[AgentSpec]) -> list[str]:
    """Return names that occur more than once, in first-seen order."""
    counts = Counter(agent.name for agent in agents)
    return [name for name, n in counts.items() if n > 1]


def ensure_unique_names(agents: Sequence[AgentSpec]) -> None:
    """Raise DuplicateAgentError if any agent name repeats.

    The history engine itself does not enforce uniqueness; editors that
    want strict validation call this before committing.
    """
    duplicates = find_duplicate_names(agents)
    if duplicates:
        raise DuplicateAgentError(duplicates)
