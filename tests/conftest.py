"""Shared test fixtures for specflow.

Provides in-memory SQLite engine, session, and repository fixtures, plus
small builders for agents and histories.
"""

import uuid

import pytest
from sqlalchemy.orm import Session, sessionmaker

from specflow.storage.engine import create_specflow_engine, init_db
from specflow.storage.sqlite import SqliteHistoryRepository


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    eng = create_specflow_engine(":memory:")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    """Session with automatic rollback after each test."""
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    sess = SessionLocal()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def sample_history_id() -> str:
    return "test-history-001"


@pytest.fixture
def history_repo(session: Session) -> SqliteHistoryRepository:
    return SqliteHistoryRepository(session)


# ------------------------------------------------------------------
# Shared test helpers (used by test_history.py, test_operations.py)
# ------------------------------------------------------------------

def make_agent(
    name: str,
    *,
    role: str = "",
    display_name: str | None = None,
    capabilities: list[str] | None = None,
    constraints: list[str] | None = None,
    can_send_to: list[str] | None = None,
    can_receive_from: list[str] | None = None,
) -> "AgentSpec":
    """Build an AgentSpec with sensible empty defaults."""
    from specflow import AgentSpec, Communication

    return AgentSpec(
        name=name,
        display_name=display_name if display_name is not None else name,
        role=role,
        capabilities=capabilities or [],
        constraints=constraints or [],
        communication=Communication(
            can_send_to=can_send_to or [],
            can_receive_from=can_receive_from or [],
        ),
    )


def make_history(**kwargs) -> "History":
    """Create an in-memory History for testing."""
    from specflow import History

    return History.open(":memory:", **kwargs)


def populate_history(h: "History", n: int = 3) -> list[str]:
    """Commit n patches (one new capability each) and return their ids.

    The baseline is a single agent ``"a"``.
    """
    if not h.state.baseline and not h.patches:
        h.initialize([make_agent("a")])
    ids = []
    for i in range(n):
        before = h.get_current_state()
        after = [
            agent.model_copy(update={"capabilities": agent.capabilities + [f"cap-{uuid.uuid4().hex[:8]}"]})
            if agent.name == "a" else agent
            for agent in before
        ]
        result = h.commit(before, after, f"add capability {i}")
        assert result.ok
        ids.append(result.patch.id)
    return ids
