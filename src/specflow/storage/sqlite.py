"""SQLite implementation of the history repository.

Uses SQLAlchemy 2.0-style queries (select() + session.execute()) and takes
a Session in its constructor. Every SQLAlchemy failure is re-raised as
PersistenceError so callers only deal with specflow exceptions.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from specflow.exceptions import PersistenceError
from specflow.models.history import HistoryState
from specflow.storage.repositories import HistoryRepository
from specflow.storage.schema import HistoryStateRow

logger = logging.getLogger(__name__)


class SqliteHistoryRepository(HistoryRepository):
    """SQLite implementation of the history repository.

    Each save commits immediately: the state on disk always matches the
    last successful transition.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _get_row(self, history_id: str) -> HistoryStateRow | None:
        stmt = select(HistoryStateRow).where(HistoryStateRow.history_id == history_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def load(self, history_id: str) -> HistoryState | None:
        try:
            row = self._get_row(history_id)
        except SQLAlchemyError as e:
            raise PersistenceError(history_id, str(e)) from e
        if row is None:
            return None
        try:
            return HistoryState.from_json(row.state_json)
        except ValidationError as e:
            raise PersistenceError(history_id, f"stored state is corrupt: {e}") from e

    def save(self, history_id: str, state: HistoryState) -> None:
        try:
            row = self._get_row(history_id)
            now = datetime.now(timezone.utc).replace(tzinfo=None)
            if row is None:
                row = HistoryStateRow(history_id=history_id)
                self._session.add(row)
            row.state_json = state.to_json()
            row.patch_count = len(state.patches)
            row.current_index = state.current_index
            row.updated_at = now
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise PersistenceError(history_id, str(e)) from e
        logger.debug(
            "Saved history %s (%d patches @ %d)",
            history_id, len(state.patches), state.current_index,
        )

    def delete(self, history_id: str) -> bool:
        try:
            result = self._session.execute(
                delete(HistoryStateRow).where(HistoryStateRow.history_id == history_id)
            )
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise PersistenceError(history_id, str(e)) from e
        return result.rowcount > 0

    def list_ids(self) -> list[str]:
        try:
            stmt = select(HistoryStateRow.history_id).order_by(HistoryStateRow.history_id)
            return list(self._session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise PersistenceError("*", str(e)) from e
