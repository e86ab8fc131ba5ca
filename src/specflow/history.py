"""History -- the public entry point for specflow.

Ties together the diff engine, the pure history transitions, durable
storage, and event delivery into one user-facing object. Editors call
``History.open()``, ``h.commit(before, after)``, ``h.undo()``, etc.

Navigation never raises: every call returns a HistoryResult whose status
says whether the cursor moved. Storage failures after a successful
transition are logged and reported as ``result.warning``; the in-memory
state keeps the transition.

Not thread-safe.  Each editing session should own its own ``History``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from specflow.engine.diff import generate_patch
from specflow.events import EventBus, EventKind, HistoryEvent, Listener
from specflow.exceptions import PersistenceError
from specflow.models.config import HistoryConfig
from specflow.models.history import HistoryState
from specflow.operations import history as ops
from specflow.operations.history import HistoryResult, HistoryStatus, LogEntry, StatusInfo
from specflow.storage.engine import create_session_factory, create_specflow_engine, init_db
from specflow.storage.sqlite import SqliteHistoryRepository

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

    from specflow.models.agent import AgentSpec
    from specflow.models.patch import Author, SpecPatch
    from specflow.storage.repositories import HistoryRepository

logger = logging.getLogger(__name__)


def _restore(
    repository: HistoryRepository, history_id: str,
) -> tuple[HistoryState | None, str | None]:
    """Load saved state, turning a storage failure into a warning.

    The returned warning says that the unreadable state will be
    overwritten by the next successful transition.
    """
    try:
        state = repository.load(history_id)
    except PersistenceError as e:
        logger.warning("Could not restore history, starting empty: %s", e)
        return None, f"{e} (starting empty; the stored state will be replaced on the next change)"
    if state is not None:
        logger.debug("Restored history %s: %s", history_id, state)
    return state, None


class History:
    """Undo/redo history for one agent collection.

    Create one via :meth:`History.open` (SQLite-backed) or
    :meth:`History.from_components` (custom repository, or none at all).

    Example::

        with History.open("specs.db") as h:
            h.initialize(agents)
            result = h.commit(agents, edited)
            h.undo()
            h.redo()
    """

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(
        self,
        *,
        config: HistoryConfig,
        repository: HistoryRepository | None,
        state: HistoryState | None = None,
        engine: Engine | None = None,
        session: Session | None = None,
        load_warning: str | None = None,
    ) -> None:
        self._config = config
        self._repository = repository
        self._state = state if state is not None else HistoryState()
        self._engine = engine
        self._session = session
        self._events = EventBus()
        self._closed = False
        self._load_warning = load_warning

    @classmethod
    def open(
        cls,
        path: str = ":memory:",
        *,
        history_id: str | None = None,
        config: HistoryConfig | None = None,
    ) -> History:
        """Open (or create) a SQLite-backed history.

        Args:
            path: SQLite path.  ``":memory:"`` for in-memory (default).
            history_id: Which saved history to load.  Defaults to
                ``config.history_id``.
            config: History configuration.  Defaults created if *None*.

        Returns:
            A ready-to-use ``History``, restored from storage when a state
            was previously saved under *history_id*.
        """
        if config is None:
            config = HistoryConfig(db_path=path)
        if history_id is not None:
            config = config.model_copy(update={"history_id": history_id})

        engine = create_specflow_engine(config.db_path, url=config.db_url)
        init_db(engine)
        session = create_session_factory(engine)()
        repository = SqliteHistoryRepository(session)

        state, load_warning = _restore(repository, config.history_id)
        return cls(
            config=config,
            repository=repository,
            state=state,
            engine=engine,
            session=session,
            load_warning=load_warning,
        )

    @classmethod
    def from_components(
        cls,
        *,
        repository: HistoryRepository | None = None,
        config: HistoryConfig | None = None,
        state: HistoryState | None = None,
    ) -> History:
        """Create a ``History`` from pre-built components.

        With ``repository=None`` nothing is persisted.  Useful for testing
        and for editors that manage storage themselves. A repository that
        fails to load is reported through ``load_warning``, as in :meth:`open`.
        """
        if config is None:
            config = HistoryConfig()
        load_warning: str | None = None
        if state is None and repository is not None:
            state, load_warning = _restore(repository, config.history_id)
        return cls(
            config=config, repository=repository, state=state, load_warning=load_warning,
        )

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def history_id(self) -> str:
        return self._config.history_id

    @property
    def config(self) -> HistoryConfig:
        return self._config

    @property
    def state(self) -> HistoryState:
        """The full current state (immutable)."""
        return self._state

    @property
    def patches(self) -> list[SpecPatch]:
        return list(self._state.patches)

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def can_undo(self) -> bool:
        return self._state.can_undo

    @property
    def can_redo(self) -> bool:
        return self._state.can_redo

    @property
    def load_warning(self) -> str | None:
        """Set when stored state could not be read at open time."""
        return self._load_warning

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every successful transition.

        Returns a function that removes the listener.
        """
        return self._events.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._events.unsubscribe(listener)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _persist(self) -> str | None:
        if self._repository is None:
            return None
        try:
            self._repository.save(self.history_id, self._state)
        except PersistenceError as e:
            logger.warning("History change kept in memory only: %s", e)
            return str(e)
        return None

    def _transition(
        self,
        new_state: HistoryState,
        result: HistoryResult,
        kind: EventKind,
        *,
        patch: SpecPatch | None = None,
    ) -> HistoryResult:
        """Adopt *new_state*, persist it, and notify listeners."""
        if not result.ok:
            return result
        self._state = new_state
        warning = self._persist()
        self._events.emit(HistoryEvent(
            kind=kind,
            history_id=self.history_id,
            current_index=new_state.current_index,
            agents=list(result.agents or []),
            patch=patch if patch is not None else result.patch,
        ))
        if warning is not None:
            result = HistoryResult(
                status=result.status,
                agents=result.agents,
                patch=result.patch,
                impact=result.impact,
                warning=warning,
            )
        return result

    def initialize(self, agents: Sequence[AgentSpec]) -> HistoryResult:
        """Record *agents* as the baseline if nothing has been committed yet.

        Once the history has patches the baseline is fixed and this call
        only reports the current collection.
        """
        if self._state.patches:
            return HistoryResult(status=HistoryStatus.OK, agents=self.get_current_state())
        new_state = ops.initialize(self._state, agents)
        result = HistoryResult(status=HistoryStatus.OK, agents=list(new_state.baseline))
        return self._transition(new_state, result, EventKind.INITIALIZED)

    def commit(
        self,
        before: Sequence[AgentSpec],
        after: Sequence[AgentSpec],
        name: str | None = None,
        *,
        author: Author | None = None,
        rationale: str | None = None,
    ) -> HistoryResult:
        """Diff *before* against *after* and record the result as a patch.

        Any redo branch beyond the cursor is discarded.

        Returns:
            HistoryResult with the committed patch and its impact, or
            status NOTHING_TO_COMMIT when the collections do not differ.
        """
        patch = generate_patch(
            before,
            after,
            name=name,
            author=author or self._config.default_author,
            rationale=rationale,
        )
        new_state, result = ops.commit(
            self._state,
            patch,
            after,
            checkpoint_interval=self._config.checkpoint_interval,
        )
        if result.ok:
            logger.debug("Committed %s at %d: %s", patch.id, new_state.current_index, patch.summary)
        return self._transition(new_state, result, EventKind.PATCH_COMMITTED)

    def undo(self) -> HistoryResult:
        """Step back one patch (BOUNDARY_REACHED on the baseline)."""
        new_state, result = ops.undo(self._state)
        return self._transition(new_state, result, EventKind.UNDONE)

    def redo(self) -> HistoryResult:
        """Step forward one patch (BOUNDARY_REACHED on the newest patch)."""
        new_state, result = ops.redo(self._state)
        return self._transition(new_state, result, EventKind.REDONE)

    def revert_to(self, patch_id: str) -> HistoryResult:
        """Move to the state right after *patch_id* (NOT_FOUND if unknown).

        Later patches stay reachable through redo until the next commit.
        """
        new_state, result = ops.revert_to(self._state, patch_id)
        patch = None
        if result.ok:
            patch = new_state.patches[new_state.current_index]
        return self._transition(new_state, result, EventKind.REVERTED, patch=patch)

    def clear(self) -> HistoryResult:
        """Drop all patches, checkpoints and the baseline."""
        result = HistoryResult(status=HistoryStatus.OK, agents=[])
        return self._transition(HistoryState(), result, EventKind.CLEARED)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_current_state(self) -> list[AgentSpec]:
        """Rebuild the collection at the cursor without moving it."""
        return ops.rebuild(self._state, self._state.current_index)

    def get_patch(self, patch_id: str) -> SpecPatch | None:
        index = self._state.find_patch_index(patch_id)
        if index == -1:
            return None
        return self._state.patches[index]

    def log(self) -> list[LogEntry]:
        """All patches, oldest first, with applied/current flags."""
        return ops.log_entries(self._state)

    def status(self) -> StatusInfo:
        state = self._state
        current = state.patches[state.current_index] if state.current_index >= 0 else None
        return StatusInfo(
            history_id=self.history_id,
            patch_count=len(state.patches),
            current_index=state.current_index,
            can_undo=state.can_undo,
            can_redo=state.can_redo,
            checkpoint_indices=[cp.patch_index for cp in state.checkpoints],
            current_patch=current,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the session and dispose the engine."""
        if self._closed:
            return
        self._closed = True
        if self._session is not None:
            self._session.close()
        if self._engine is not None:
            self._engine.dispose()

    def __enter__(self) -> History:
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._closed:
            return f"History(history_id='{self.history_id}', closed=True)"
        return f"History(history_id='{self.history_id}', state='{self._state}')"
