"""Abstract repository interface for specflow storage.

No SQLAlchemy imports here -- pure abstract contract. The concrete
implementation is in sqlite.py.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from specflow.models.history import HistoryState


class HistoryRepository(ABC):
    """Durable storage for whole HistoryState values.

    Implementations raise PersistenceError on any storage failure.
    """

    @abstractmethod
    def load(self, history_id: str) -> HistoryState | None:
        """Load the state saved under *history_id*. None if never saved."""
        ...

    @abstractmethod
    def save(self, history_id: str, state: HistoryState) -> None:
        """Persist *state*, replacing anything saved under *history_id*."""
        ...

    @abstractmethod
    def delete(self, history_id: str) -> bool:
        """Remove the saved state. Returns True if something was deleted."""
        ...

    @abstractmethod
    def list_ids(self) -> list[str]:
        """All history ids with saved state, sorted."""
        ...
