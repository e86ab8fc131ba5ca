"""specflow exception hierarchy.

All specflow-specific exceptions inherit from SpecFlowError.

History navigation never raises: boundary and not-found conditions are
reported through ``HistoryResult`` values. These exceptions cover the
storage and document layers, plus the opt-in name validation helper.
"""


class SpecFlowError(Exception):
    """Base exception for all specflow errors."""


class PersistenceError(SpecFlowError):
    """Raised when the history state cannot be read or written."""

    def __init__(self, history_id: str, reason: str) -> None:
        self.history_id = history_id
        self.reason = reason
        super().__init__(f"Persistence failed for history '{history_id}': {reason}")


class DocumentParseError(SpecFlowError):
    """Raised when an agent collection document cannot be parsed."""


class DuplicateAgentError(SpecFlowError):
    """Raised when a collection contains the same agent name more than once."""

    def __init__(self, names: list[str]) -> None:
        self.names = names
        super().__init__(f"Duplicate agent names: {', '.join(names)}")
