"""Tests for the History facade.

Covers the editor-facing commit/undo/redo/revert flow, queries, event
delivery, and how storage failures surface as warnings.
"""

from __future__ import annotations

import logging

import pytest

from specflow import (
    Author,
    DiffOperation,
    DiffPath,
    EventKind,
    History,
    HistoryConfig,
    HistoryStatus,
    Impact,
    PersistenceError,
)
from specflow.models.history import HistoryState
from specflow.storage.repositories import HistoryRepository
from tests.conftest import make_agent, make_history, populate_history


class FailingRepository(HistoryRepository):
    """Repository whose writes always fail."""

    def __init__(self) -> None:
        self.attempts = 0

    def load(self, history_id: str) -> HistoryState | None:
        return None

    def save(self, history_id: str, state: HistoryState) -> None:
        self.attempts += 1
        raise PersistenceError(history_id, "disk full")

    def delete(self, history_id: str) -> bool:
        return False

    def list_ids(self) -> list[str]:
        return []


class UnreadableRepository(FailingRepository):
    """Repository whose stored state cannot be read back."""

    def load(self, history_id: str) -> HistoryState | None:
        raise PersistenceError(history_id, "stored state is corrupt")


class TestConstraintScenario:
    """One agent gains a constraint, then the edit is undone and redone."""

    def test_commit_undo_redo(self) -> None:
        baseline = [make_agent("a", constraints=[])]
        edited = [make_agent("a", constraints=["x"])]

        with make_history() as h:
            h.initialize(baseline)
            result = h.commit(baseline, edited)

            assert result.ok
            patch = result.patch
            assert len(patch.diffs) == 1
            diff = patch.diffs[0]
            assert diff.agent_name == "a"
            assert diff.path is DiffPath.CONSTRAINTS
            assert diff.operation is DiffOperation.ADD
            assert diff.after == "x"
            assert result.impact is Impact.HIGH
            assert "a" in patch.summary

            undone = h.undo()
            assert undone.agents == baseline
            redone = h.redo()
            assert redone.agents == edited

    def test_duplicate_constraint_removed_and_restored(self) -> None:
        baseline = [make_agent("a", constraints=["x", "x"])]
        edited = [make_agent("a")]

        with make_history() as h:
            h.initialize(baseline)
            result = h.commit(baseline, edited)
            assert result.ok
            assert len(result.patch.diffs) == 1

            assert h.undo().agents == baseline
            redone = h.redo()
            assert redone.agents == edited
            assert redone.agents[0].constraints == []


class TestCommit:
    def test_nothing_to_commit(self) -> None:
        agents = [make_agent("a")]
        with make_history() as h:
            h.initialize(agents)
            result = h.commit(agents, list(agents))
            assert result.status is HistoryStatus.NOTHING_TO_COMMIT
            assert h.patches == []

    def test_reordered_capabilities_are_nothing_to_commit(self) -> None:
        before = [make_agent("a", capabilities=["x", "y"])]
        after = [make_agent("a", capabilities=["y", "x"])]
        with make_history() as h:
            h.initialize(before)
            assert h.commit(before, after).status is HistoryStatus.NOTHING_TO_COMMIT

    def test_name_author_rationale(self) -> None:
        with make_history() as h:
            h.initialize([])
            result = h.commit([], [make_agent("a")], "seed", author=Author.AI, rationale="why")
            assert result.patch.name == "seed"
            assert result.patch.author is Author.AI
            assert result.patch.rationale == "why"

    def test_default_author_from_config(self) -> None:
        config = HistoryConfig(default_author=Author.SYSTEM)
        with make_history(config=config) as h:
            result = h.commit([], [make_agent("a")])
            assert result.patch.author is Author.SYSTEM

    def test_commit_after_undo_drops_redo_branch(self) -> None:
        with make_history() as h:
            ids = populate_history(h, 3)
            h.undo()
            assert h.can_redo
            populate_history(h, 1)
            assert not h.can_redo
            assert h.redo().status is HistoryStatus.BOUNDARY_REACHED
            assert h.get_patch(ids[2]) is None
            assert len(h.patches) == 3


class TestNavigation:
    def test_boundaries(self) -> None:
        with make_history() as h:
            assert h.undo().status is HistoryStatus.BOUNDARY_REACHED
            assert h.redo().status is HistoryStatus.BOUNDARY_REACHED
            populate_history(h, 1)
            assert h.redo().status is HistoryStatus.BOUNDARY_REACHED
            assert h.undo().ok
            assert h.undo().status is HistoryStatus.BOUNDARY_REACHED

    def test_revert_to(self) -> None:
        with make_history() as h:
            ids = populate_history(h, 4)
            result = h.revert_to(ids[1])
            assert result.ok
            assert h.current_index == 1
            assert result.agents == h.get_current_state()
            assert len(h.get_current_state()[0].capabilities) == 2
            assert h.can_redo

    def test_revert_to_unknown(self) -> None:
        with make_history() as h:
            populate_history(h, 2)
            assert h.revert_to("patch-nope").status is HistoryStatus.NOT_FOUND
            assert h.current_index == 1

    def test_get_current_state_does_not_move(self) -> None:
        with make_history() as h:
            populate_history(h, 2)
            h.get_current_state()
            assert h.current_index == 1

    def test_checkpointed_history(self) -> None:
        config = HistoryConfig(checkpoint_interval=5)
        with make_history(config=config) as h:
            populate_history(h, 22)
            assert h.status().checkpoint_indices == [5, 10, 15, 20]
            for _ in range(22):
                assert h.undo().ok
            assert h.get_current_state() == [make_agent("a")]
            assert h.revert_to(h.patches[-1].id).ok
            assert len(h.get_current_state()[0].capabilities) == 22


class TestInitialize:
    def test_sets_baseline(self) -> None:
        with make_history() as h:
            result = h.initialize([make_agent("a")])
            assert result.ok
            assert h.get_current_state() == [make_agent("a")]

    def test_ignored_once_patches_exist(self) -> None:
        with make_history() as h:
            populate_history(h, 1)
            current = h.get_current_state()
            result = h.initialize([make_agent("other")])
            assert result.ok
            assert result.agents == current
            assert h.state.baseline == [make_agent("a")]


class TestQueries:
    def test_log(self) -> None:
        with make_history() as h:
            ids = populate_history(h, 3)
            h.undo()
            entries = h.log()
            assert [e.patch.id for e in entries] == ids
            assert [e.applied for e in entries] == [True, True, False]
            assert entries[1].is_current

    def test_status(self) -> None:
        with make_history(history_id="proj") as h:
            ids = populate_history(h, 2)
            info = h.status()
            assert info.history_id == "proj"
            assert info.patch_count == 2
            assert info.current_index == 1
            assert info.can_undo and not info.can_redo
            assert info.current_patch.id == ids[1]

    def test_status_at_baseline(self) -> None:
        with make_history() as h:
            info = h.status()
            assert info.current_patch is None
            assert "baseline" in str(info)

    def test_get_patch(self) -> None:
        with make_history() as h:
            ids = populate_history(h, 2)
            assert h.get_patch(ids[0]).id == ids[0]
            assert h.get_patch("missing") is None

    def test_clear(self) -> None:
        with make_history() as h:
            populate_history(h, 3)
            assert h.clear().ok
            assert h.patches == []
            assert h.current_index == -1
            assert h.get_current_state() == []


class TestEvents:
    def test_events_for_each_transition(self) -> None:
        events = []
        with make_history() as h:
            h.subscribe(events.append)
            populate_history(h, 2)
            h.undo()
            h.redo()
            h.revert_to(h.patches[0].id)
            h.clear()
        assert [e.kind for e in events] == [
            EventKind.INITIALIZED,
            EventKind.PATCH_COMMITTED,
            EventKind.PATCH_COMMITTED,
            EventKind.UNDONE,
            EventKind.REDONE,
            EventKind.REVERTED,
            EventKind.CLEARED,
        ]

    def test_commit_event_carries_patch(self) -> None:
        events = []
        with make_history(history_id="sync") as h:
            h.subscribe(events.append)
            result = h.commit([], [make_agent("a")])
        event = events[0]
        assert event.patch == result.patch
        assert event.agents == [make_agent("a")]
        message = event.to_message()
        assert message["type"] == "patch_committed"
        assert message["historyId"] == "sync"
        assert message["patch"]["id"] == result.patch.id

    def test_no_event_when_nothing_happens(self) -> None:
        events = []
        with make_history() as h:
            h.subscribe(events.append)
            h.undo()
            h.commit([], [])
            h.revert_to("missing")
        assert events == []

    def test_unsubscribe(self) -> None:
        events = []
        with make_history() as h:
            stop = h.subscribe(events.append)
            populate_history(h, 1)
            stop()
            populate_history(h, 1)
        assert len(events) == 2

    def test_failing_listener_does_not_break_transition(self, caplog) -> None:
        def boom(event):
            raise RuntimeError("listener broke")

        seen = []
        with make_history() as h:
            h.subscribe(boom)
            h.subscribe(seen.append)
            with caplog.at_level(logging.WARNING, logger="specflow.events"):
                result = h.commit([], [make_agent("a")])
            assert result.ok
            assert len(h.patches) == 1
        assert len(seen) == 1
        assert "listener" in caplog.text


class TestPersistenceFailure:
    def test_warning_on_failed_save(self, caplog) -> None:
        repo = FailingRepository()
        h = History.from_components(repository=repo)
        with caplog.at_level(logging.WARNING, logger="specflow.history"):
            result = h.commit([], [make_agent("a")])
        assert result.ok
        assert "disk full" in result.warning
        assert len(h.patches) == 1
        assert repo.attempts == 1
        assert "kept in memory" in caplog.text

    def test_in_memory_state_keeps_working(self) -> None:
        h = History.from_components(repository=FailingRepository())
        h.commit([], [make_agent("a")])
        result = h.undo()
        assert result.ok
        assert result.warning is not None
        assert h.current_index == -1

    def test_unreadable_state_starts_empty(self) -> None:
        h = History.from_components(repository=UnreadableRepository())
        assert "corrupt" in h.load_warning
        assert "will be replaced" in h.load_warning
        assert h.patches == []
        assert h.current_index == -1

    def test_explicit_state_skips_load(self) -> None:
        h = History.from_components(repository=UnreadableRepository(), state=HistoryState())
        assert h.load_warning is None

    def test_no_repository_no_warning(self) -> None:
        h = History.from_components()
        result = h.commit([], [make_agent("a")])
        assert result.ok
        assert result.warning is None


class TestLifecycle:
    def test_close_is_idempotent(self) -> None:
        h = make_history()
        h.close()
        h.close()
        assert "closed=True" in repr(h)

    def test_repr(self) -> None:
        with make_history(history_id="x") as h:
            assert "x" in repr(h)

    def test_config_rejects_zero_interval(self) -> None:
        with pytest.raises(ValueError):
            HistoryConfig(checkpoint_interval=0)
