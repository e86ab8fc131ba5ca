"""History events and listener registry.

Editors and sync collaborators learn about history changes by subscribing
to a History instance. Every successful transition emits one HistoryEvent
carrying the resulting collection; ``PATCH_COMMITTED`` events also carry
the committed SpecPatch, which is the value handed to sync transports.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from specflow.models.agent import AgentSpec
    from specflow.models.patch import SpecPatch

logger = logging.getLogger(__name__)


class EventKind(str, enum.Enum):
    """What happened to the history."""

    INITIALIZED = "initialized"
    PATCH_COMMITTED = "patch_committed"
    UNDONE = "undone"
    REDONE = "redone"
    REVERTED = "reverted"
    CLEARED = "cleared"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HistoryEvent:
    """A single history transition, as seen by listeners.

    Attributes:
        kind: Which transition happened.
        history_id: The history it happened to.
        current_index: Cursor position after the transition.
        agents: Collection at the new cursor position.
        patch: The committed patch (PATCH_COMMITTED) or the patch the cursor
            moved to (REVERTED).
        timestamp: When the event was emitted.
    """

    kind: EventKind
    history_id: str
    current_index: int
    agents: list[AgentSpec] = field(default_factory=list)
    patch: SpecPatch | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_message(self) -> dict:
        """JSON-ready form for a sync transport."""
        message: dict = {
            "type": self.kind.value,
            "historyId": self.history_id,
            "currentIndex": self.current_index,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.patch is not None:
            message["patch"] = self.patch.to_dict()
        return message


Listener = Callable[[HistoryEvent], None]


class EventBus:
    """Ordered list of listeners. Owned by a History instance."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            self.unsubscribe(listener)

        return _unsubscribe

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event: HistoryEvent) -> None:
        """Deliver *event* to every listener in subscription order.

        A failing listener is logged and skipped; the transition that
        produced the event has already been applied.
        """
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.warning(
                    "History listener %r failed on %s", listener, event.kind.value,
                    exc_info=True,
                )

    def __len__(self) -> int:
        return len(self._listeners)
