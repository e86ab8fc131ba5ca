"""Tests for the Spec-Kit YAML codec and the parse cache."""

from __future__ import annotations

import pytest
import yaml

from specflow.codec import (
    ParseCache,
    agent_from_document,
    agent_to_document,
    dump_collection,
    load_collection,
    parse_documents,
)
from specflow.exceptions import DocumentParseError
from tests.conftest import make_agent

DOCUMENT = """\
kind: Agent
version: v1
metadata:
  name: planner
  displayName: Planner
  description: breaks work down
spec:
  role: |
    Plan the work.
  capabilities:
    - plan
  constraints:
    - "no code"
  communication:
    canSendTo:
      - coder
    canReceiveFrom: []
---
kind: Workflow
metadata:
  name: not-an-agent
---
kind: Agent
metadata:
  name: coder
"""


class TestLoadCollection:
    def test_multi_document_stream(self) -> None:
        agents = load_collection(DOCUMENT)
        assert [a.name for a in agents] == ["planner", "coder"]
        planner = agents[0]
        assert planner.display_name == "Planner"
        assert planner.role == "Plan the work.\n"
        assert planner.capabilities == ["plan"]
        assert planner.constraints == ["no code"]
        assert planner.communication.can_send_to == ["coder"]

    def test_other_kinds_skipped(self) -> None:
        assert "not-an-agent" not in [a.name for a in load_collection(DOCUMENT)]

    def test_defaults(self) -> None:
        coder = load_collection(DOCUMENT)[1]
        assert coder == make_agent("coder")

    def test_blank_text_is_empty_collection(self) -> None:
        assert load_collection("") == []
        assert load_collection("  \n") == []

    def test_non_list_fields_become_empty(self) -> None:
        agent = agent_from_document({
            "kind": "Agent",
            "metadata": {"name": "a"},
            "spec": {"capabilities": "plan", "communication": "nobody"},
        })
        assert agent.capabilities == []
        assert agent.communication.can_send_to == []

    def test_invalid_yaml(self) -> None:
        with pytest.raises(DocumentParseError, match="Invalid YAML"):
            load_collection("kind: Agent\nmetadata: [unclosed\n")

    def test_agent_without_name(self) -> None:
        text = "kind: Agent\nmetadata:\n  name: a\n---\nkind: Agent\nspec:\n  role: x\n"
        with pytest.raises(DocumentParseError, match="#1 has no metadata.name"):
            load_collection(text)

    def test_invalid_field(self) -> None:
        text = "kind: Agent\nmetadata:\n  name: a\nspec:\n  capabilities:\n    - {nested: true}\n"
        with pytest.raises(DocumentParseError, match="'a' is invalid"):
            load_collection(text)

    def test_parse_documents_ignores_non_mappings(self) -> None:
        assert parse_documents([None, "text", ["x"], {"kind": "Agent", "metadata": {"name": "a"}}]) == [
            make_agent("a"),
        ]


class TestDumpCollection:
    def test_round_trip(self) -> None:
        agents = load_collection(DOCUMENT)
        assert load_collection(dump_collection(agents)) == agents

    def test_one_document_per_agent(self) -> None:
        text = dump_collection([make_agent("a"), make_agent("b", can_send_to=["a"])])
        docs = list(yaml.safe_load_all(text))
        assert [d["kind"] for d in docs] == ["Agent", "Agent"]
        assert docs[1]["spec"]["communication"] == {"canSendTo": ["a"], "canReceiveFrom": []}

    def test_document_shape(self) -> None:
        doc = agent_to_document(make_agent("a", role="r"))
        assert doc["version"] == "v1"
        assert doc["metadata"] == {"name": "a", "displayName": "a"}
        assert doc["spec"]["role"] == "r"

    def test_empty_collection(self) -> None:
        assert load_collection(dump_collection([])) == []


class TestParseCache:
    def test_hit_on_same_text(self) -> None:
        cache = ParseCache()
        first = cache.load(DOCUMENT)
        second = cache.load(DOCUMENT)
        assert first == second
        assert (cache.hits, cache.misses) == (1, 1)

    def test_miss_on_changed_text(self) -> None:
        cache = ParseCache()
        cache.load(DOCUMENT)
        cache.load("kind: Agent\nmetadata:\n  name: other\n")
        assert (cache.hits, cache.misses) == (0, 2)
        assert [a.name for a in cache.agents] == ["other"]

    def test_returns_copies(self) -> None:
        cache = ParseCache()
        result = cache.load(DOCUMENT)
        result.clear()
        assert len(cache.load(DOCUMENT)) == 2

    def test_clear(self) -> None:
        cache = ParseCache()
        cache.load(DOCUMENT)
        cache.clear()
        assert cache.content_hash is None
        cache.load(DOCUMENT)
        assert cache.misses == 2

    def test_parse_error_keeps_previous_entry(self) -> None:
        cache = ParseCache()
        cache.load(DOCUMENT)
        digest = cache.content_hash
        with pytest.raises(DocumentParseError):
            cache.load("metadata: [")
        assert cache.content_hash == digest
