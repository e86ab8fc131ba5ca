"""Spec-Kit YAML codec for agent collections.

A collection is a multi-document YAML stream. Each agent is one document
with ``kind: Agent``; documents of any other kind are skipped::

    kind: Agent
    version: v1
    metadata:
      name: planner
      displayName: Planner
    spec:
      role: break work down
      capabilities: [plan]
      constraints: ["no code"]
      communication:
        canSendTo: [coder]
        canReceiveFrom: []

Missing fields fall back to empty values, non-list list fields to ``[]``,
and ``displayName`` falls back to ``name``.

ParseCache is a caller-owned, single-slot memo keyed by the SHA-256 of
the document text, for editors that re-parse the same buffer repeatedly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

import yaml
from pydantic import ValidationError

from specflow.engine.hashing import text_hash
from specflow.exceptions import DocumentParseError
from specflow.models.agent import AgentSpec

logger = logging.getLogger(__name__)

AGENT_KIND = "Agent"
DOCUMENT_VERSION = "v1"


def _mapping(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _string_list(value: Any) -> list:
    return list(value) if isinstance(value, list) else []


def agent_from_document(doc: dict, position: int = 0) -> AgentSpec:
    """Convert one ``kind: Agent`` document into an AgentSpec.

    Raises:
        DocumentParseError: If the agent has no name or a field has the wrong type.
    """
    metadata = _mapping(doc.get("metadata"))
    spec = _mapping(doc.get("spec"))
    communication = _mapping(spec.get("communication"))

    name = metadata.get("name")
    if not name:
        raise DocumentParseError(f"Agent document #{position} has no metadata.name")
    name = str(name)

    try:
        return AgentSpec(
            name=name,
            display_name=str(metadata.get("displayName") or name),
            role=str(spec.get("role") or ""),
            capabilities=_string_list(spec.get("capabilities")),
            constraints=_string_list(spec.get("constraints")),
            communication={
                "canSendTo": _string_list(communication.get("canSendTo")),
                "canReceiveFrom": _string_list(communication.get("canReceiveFrom")),
            },
        )
    except ValidationError as e:
        raise DocumentParseError(f"Agent '{name}' is invalid: {e}") from e


def agent_to_document(agent: AgentSpec) -> dict:
    """Convert an AgentSpec into a ``kind: Agent`` document."""
    return {
        "kind": AGENT_KIND,
        "version": DOCUMENT_VERSION,
        "metadata": {
            "name": agent.name,
            "displayName": agent.display_name,
        },
        "spec": {
            "role": agent.role,
            "capabilities": list(agent.capabilities),
            "constraints": list(agent.constraints),
            "communication": agent.communication.model_dump(by_alias=True),
        },
    }


def parse_documents(docs: Iterable[Any]) -> list[AgentSpec]:
    """Build a collection from already-loaded YAML documents.

    Only mappings with ``kind: Agent`` are kept, in stream order.
    """
    agent_docs = [d for d in docs if isinstance(d, dict) and d.get("kind") == AGENT_KIND]
    return [agent_from_document(doc, i) for i, doc in enumerate(agent_docs)]


def load_collection(text: str) -> list[AgentSpec]:
    """Parse a multi-document YAML stream into a collection.

    Raises:
        DocumentParseError: If the text is not valid YAML or an agent is malformed.
    """
    try:
        docs = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise DocumentParseError(f"Invalid YAML: {e}") from e
    return parse_documents(docs)


def dump_collection(agents: Sequence[AgentSpec]) -> str:
    """Serialize a collection to a multi-document YAML stream."""
    return yaml.safe_dump_all(
        [agent_to_document(agent) for agent in agents],
        sort_keys=False,
        allow_unicode=True,
        width=120,
    )


@dataclass
class ParseCache:
    """Single-slot parse memo, owned by whoever creates it.

    Holds the collection parsed from the most recent document. Parsing a
    document with the same content hash returns the cached collection
    without decoding it again.
    """

    content_hash: str | None = None
    agents: list[AgentSpec] = field(default_factory=list)
    hits: int = 0
    misses: int = 0

    def load(self, text: str) -> list[AgentSpec]:
        digest = text_hash(text)
        if digest == self.content_hash:
            self.hits += 1
            logger.debug("Parse cache hit: %s", digest[:12])
            return list(self.agents)
        agents = load_collection(text)
        self.content_hash = digest
        self.agents = agents
        self.misses += 1
        logger.debug("Parse cache miss: %s", digest[:12])
        return list(agents)

    def clear(self) -> None:
        self.content_hash = None
        self.agents = []
