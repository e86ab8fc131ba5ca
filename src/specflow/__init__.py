"""specflow: checkpointed undo/redo history for agent spec collections.

Computes deterministic patches between two versions of a collection of
agent records, classifies their impact, and keeps a linear history that
can be navigated in bounded time thanks to periodic checkpoints.
"""

from specflow._version import __version__

# Core entry point
from specflow.history import History

# Document model
from specflow.models.agent import (
    AgentSpec,
    Communication,
    ensure_unique_names,
    find_duplicate_names,
)

# Diff and patch types
from specflow.models.patch import (
    Author,
    DiffOperation,
    DiffPath,
    Impact,
    SpecDiff,
    SpecPatch,
)

# History state and configuration
from specflow.models.history import Checkpoint, HistoryState
from specflow.models.config import DEFAULT_CHECKPOINT_INTERVAL, HistoryConfig

# Engines
from specflow.engine.diff import NO_CHANGES_SUMMARY, generate_patch
from specflow.engine.impact import classify_impact
from specflow.engine.patch import (
    apply_patch,
    collections_equivalent,
    invert_patch,
    is_patch_empty,
    revert_patch,
)

# Operation results
from specflow.operations.history import HistoryResult, HistoryStatus, LogEntry, StatusInfo

# Events
from specflow.events import EventKind, HistoryEvent

# Document codec
from specflow.codec import ParseCache, dump_collection, load_collection

# Storage
from specflow.storage.repositories import HistoryRepository
from specflow.storage.sqlite import SqliteHistoryRepository

# Exceptions
from specflow.exceptions import (
    DocumentParseError,
    DuplicateAgentError,
    PersistenceError,
    SpecFlowError,
)

__all__ = [
    "__version__",
    # Core
    "History",
    # Document model
    "AgentSpec",
    "Communication",
    "ensure_unique_names",
    "find_duplicate_names",
    # Diff and patch types
    "Author",
    "DiffOperation",
    "DiffPath",
    "Impact",
    "SpecDiff",
    "SpecPatch",
    # State and config
    "Checkpoint",
    "HistoryState",
    "DEFAULT_CHECKPOINT_INTERVAL",
    "HistoryConfig",
    # Engines
    "NO_CHANGES_SUMMARY",
    "generate_patch",
    "classify_impact",
    "apply_patch",
    "collections_equivalent",
    "invert_patch",
    "is_patch_empty",
    "revert_patch",
    # Results
    "HistoryResult",
    "HistoryStatus",
    "LogEntry",
    "StatusInfo",
    # Events
    "EventKind",
    "HistoryEvent",
    # Codec
    "ParseCache",
    "dump_collection",
    "load_collection",
    # Storage
    "HistoryRepository",
    "SqliteHistoryRepository",
    # Exceptions
    "SpecFlowError",
    "DocumentParseError",
    "DuplicateAgentError",
    "PersistenceError",
]
