"""SQLAlchemy ORM schema for specflow.

Defines the database tables: history_states and _specflow_meta.

The full HistoryState is stored as one JSON document per history so that
what is read back is exactly what was written. The cursor columns are
denormalized copies for listing without parsing the document.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all specflow ORM models."""

    pass


class HistoryStateRow(Base):
    """Persisted HistoryState, keyed by history id."""

    __tablename__ = "history_states"

    history_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    state_json: Mapped[str] = mapped_column(Text, nullable=False)
    patch_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_index: Mapped[int] = mapped_column(Integer, nullable=False, default=-1)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class SpecFlowMetaRow(Base):
    """Key-value metadata for the specflow database itself (e.g., schema version)."""

    __tablename__ = "_specflow_meta"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
