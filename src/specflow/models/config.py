"""Configuration models for specflow.

HistoryConfig holds per-history settings: where state is persisted and
how often checkpoints are taken.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from specflow.models.patch import Author

DEFAULT_CHECKPOINT_INTERVAL = 10


class HistoryConfig(BaseModel):
    """Per-history configuration."""

    db_path: str = ":memory:"
    db_url: Optional[str] = None
    history_id: str = "default"
    checkpoint_interval: int = Field(default=DEFAULT_CHECKPOINT_INTERVAL, ge=1)
    default_author: Author = Author.HUMAN
