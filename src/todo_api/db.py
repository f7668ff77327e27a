from __future__ import annotations

import os
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, List, Optional

import structlog

from .errors import NotFoundError, UnexpectedError
from .models import LabelEntity, TodoEntity
from .repositories import LabelRepository, TodoRepository
from .schemas import LabelCreate, TodoCreate, TodoUpdate

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class _TodoCols:
    table: str = "todos"
    id: str = "id"
    text: str = "text"
    completed: str = "completed"


@dataclass(frozen=True)
class _LabelCols:
    table: str = "labels"
    id: str = "id"
    name: str = "name"


_TODO = _TodoCols()
_LABEL = _LabelCols()

# SQLite INTEGER is a signed 64-bit value
_MIN_ID = -(2**63)
_MAX_ID = 2**63 - 1


class _SQLiteBase(ABC):
    """
    Connection handling shared by the SQLite repositories.

    A connection is opened per operation and committed when the block exits
    cleanly; sqlite3 failures surface as UnexpectedError. Ids that SQLite
    cannot store are never issued, so they are treated as absent.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            logger.error("sqlite_connect_failed", db_path=self._db_path, error=str(exc))
            raise UnexpectedError(str(exc)) from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            logger.error("sqlite_statement_failed", db_path=self._db_path, error=str(exc))
            raise UnexpectedError(str(exc)) from exc
        finally:
            conn.close()

    @staticmethod
    def _storable(entity_id: int) -> bool:
        return _MIN_ID <= entity_id <= _MAX_ID

    @abstractmethod
    def _init_db(self) -> None:
        """Create the backing table if it does not exist."""


class SQLiteTodoRepository(_SQLiteBase, TodoRepository):
    """
    SQLite repository implementing the TodoRepository interface. Every
    operation is a single SQL statement.
    """

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_TODO.table} (
                    {_TODO.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_TODO.text} TEXT NOT NULL,
                    {_TODO.completed} INTEGER NOT NULL DEFAULT 0
                )
                """
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TodoEntity:
        return {
            "id": int(row[_TODO.id]),
            "text": str(row[_TODO.text]),
            "completed": bool(row[_TODO.completed]),
        }

    def create(self, data: TodoCreate) -> TodoEntity:
        with self._conn() as conn:
            rows = conn.execute(
                f"INSERT INTO {_TODO.table} ({_TODO.text}, {_TODO.completed}) VALUES (?, 0) RETURNING *",
                (data.text,),
            ).fetchall()
        entity = self._row_to_entity(rows[0])
        logger.debug("todo_created", todo_id=entity["id"])
        return entity

    def find(self, todo_id: int) -> Optional[TodoEntity]:
        if not self._storable(todo_id):
            return None
        with self._conn() as conn:
            row = conn.execute(f"SELECT * FROM {_TODO.table} WHERE {_TODO.id} = ?", (todo_id,)).fetchone()
            return self._row_to_entity(row) if row else None

    def all(self) -> List[TodoEntity]:
        with self._conn() as conn:
            rows = conn.execute(f"SELECT * FROM {_TODO.table} ORDER BY {_TODO.id}").fetchall()
            return [self._row_to_entity(r) for r in rows]

    def update(self, todo_id: int, data: TodoUpdate) -> TodoEntity:
        if not self._storable(todo_id):
            raise NotFoundError(todo_id)
        # NULL parameters keep the stored value
        with self._conn() as conn:
            rows = conn.execute(
                f"""
                UPDATE {_TODO.table}
                SET {_TODO.text} = COALESCE(?, {_TODO.text}),
                    {_TODO.completed} = COALESCE(?, {_TODO.completed})
                WHERE {_TODO.id} = ?
                RETURNING *
                """,
                (
                    data.text,
                    None if data.completed is None else int(data.completed),
                    todo_id,
                ),
            ).fetchall()
        if not rows:
            raise NotFoundError(todo_id)
        logger.debug("todo_updated", todo_id=todo_id)
        return self._row_to_entity(rows[0])

    def delete(self, todo_id: int) -> None:
        if not self._storable(todo_id):
            raise NotFoundError(todo_id)
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_TODO.table} WHERE {_TODO.id} = ?", (todo_id,))
            deleted = cur.rowcount
        if deleted == 0:
            raise NotFoundError(todo_id)
        logger.debug("todo_deleted", todo_id=todo_id)


class SQLiteLabelRepository(_SQLiteBase, LabelRepository):
    """SQLite repository implementing the LabelRepository interface."""

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_LABEL.table} (
                    {_LABEL.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_LABEL.name} TEXT NOT NULL
                )
                """
            )

    def _row_to_entity(self, row: sqlite3.Row) -> LabelEntity:
        return {"id": int(row[_LABEL.id]), "name": str(row[_LABEL.name])}

    def create(self, data: LabelCreate) -> LabelEntity:
        with self._conn() as conn:
            rows = conn.execute(
                f"INSERT INTO {_LABEL.table} ({_LABEL.name}) VALUES (?) RETURNING *",
                (data.name,),
            ).fetchall()
        entity = self._row_to_entity(rows[0])
        logger.debug("label_created", label_id=entity["id"])
        return entity

    def all(self) -> List[LabelEntity]:
        with self._conn() as conn:
            rows = conn.execute(f"SELECT * FROM {_LABEL.table} ORDER BY {_LABEL.id}").fetchall()
            return [self._row_to_entity(r) for r in rows]

    def delete(self, label_id: int) -> None:
        if not self._storable(label_id):
            raise NotFoundError(label_id)
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_LABEL.table} WHERE {_LABEL.id} = ?", (label_id,))
            deleted = cur.rowcount
        if deleted == 0:
            raise NotFoundError(label_id)
        logger.debug("label_deleted", label_id=label_id)
