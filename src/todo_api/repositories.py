from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from threading import Condition, Lock
from typing import Dict, Iterator, List, Optional, Tuple

import structlog

from .errors import NotFoundError
from .models import LabelEntity, TodoEntity
from .schemas import LabelCreate, TodoCreate, TodoUpdate
from .settings import Settings, get_settings

logger = structlog.get_logger(__name__)


# PUBLIC_INTERFACE
class TodoRepository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def create(self, data: TodoCreate) -> TodoEntity:
        """Create and return a new TodoEntity with the next unused id."""

    @abstractmethod
    def find(self, todo_id: int) -> Optional[TodoEntity]:
        """Return a TodoEntity by id, or None if not found."""

    @abstractmethod
    def all(self) -> List[TodoEntity]:
        """Return every stored TodoEntity."""

    @abstractmethod
    def update(self, todo_id: int, data: TodoUpdate) -> TodoEntity:
        """
        Apply the fields present in `data` and return the updated entity.
        Raises NotFoundError if the id is absent.
        """

    @abstractmethod
    def delete(self, todo_id: int) -> None:
        """Delete a TodoEntity by id. Raises NotFoundError if the id is absent."""


# PUBLIC_INTERFACE
class LabelRepository(ABC):
    """Abstract repository contract for label storage backends."""

    @abstractmethod
    def create(self, data: LabelCreate) -> LabelEntity:
        """Create and return a new LabelEntity with the next unused id."""

    @abstractmethod
    def all(self) -> List[LabelEntity]:
        """Return every stored LabelEntity."""

    @abstractmethod
    def delete(self, label_id: int) -> None:
        """Delete a LabelEntity by id. Raises NotFoundError if the id is absent."""


class ReadWriteLock:
    """
    Many concurrent readers or a single writer.

    Writers are preferred: once a writer is waiting, new readers block until
    it has finished, so a steady stream of reads cannot starve mutations.
    """

    def __init__(self) -> None:
        self._cond = Condition(Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class InMemoryTodoRepository(TodoRepository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._items: Dict[int, TodoEntity] = {}
        self._next_id = 1

    def create(self, data: TodoCreate) -> TodoEntity:
        with self._lock.write():
            entity: TodoEntity = {"id": self._next_id, "text": data.text, "completed": False}
            self._next_id += 1
            self._items[entity["id"]] = entity
        logger.debug("todo_created", todo_id=entity["id"])
        return entity.copy()

    def find(self, todo_id: int) -> Optional[TodoEntity]:
        with self._lock.read():
            item = self._items.get(todo_id)
            return None if item is None else item.copy()

    def all(self) -> List[TodoEntity]:
        with self._lock.read():
            # Return copies to avoid external mutation
            return [t.copy() for t in self._items.values()]

    def update(self, todo_id: int, data: TodoUpdate) -> TodoEntity:
        with self._lock.write():
            existing = self._items.get(todo_id)
            if existing is None:
                raise NotFoundError(todo_id)

            # Update only provided fields
            updated = existing.copy()
            if data.text is not None:
                updated["text"] = data.text
            if data.completed is not None:
                updated["completed"] = data.completed
            self._items[todo_id] = updated
        logger.debug("todo_updated", todo_id=todo_id)
        return updated.copy()

    def delete(self, todo_id: int) -> None:
        with self._lock.write():
            if self._items.pop(todo_id, None) is None:
                raise NotFoundError(todo_id)
        logger.debug("todo_deleted", todo_id=todo_id)


class InMemoryLabelRepository(LabelRepository):
    """In-memory label store with the same locking scheme as the todo store."""

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._items: Dict[int, LabelEntity] = {}
        self._next_id = 1

    def create(self, data: LabelCreate) -> LabelEntity:
        with self._lock.write():
            entity: LabelEntity = {"id": self._next_id, "name": data.name}
            self._next_id += 1
            self._items[entity["id"]] = entity
        logger.debug("label_created", label_id=entity["id"])
        return entity.copy()

    def all(self) -> List[LabelEntity]:
        with self._lock.read():
            return [label.copy() for label in self._items.values()]

    def delete(self, label_id: int) -> None:
        with self._lock.write():
            if self._items.pop(label_id, None) is None:
                raise NotFoundError(label_id)
        logger.debug("label_deleted", label_id=label_id)


# PUBLIC_INTERFACE
def build_repositories(settings: Optional[Settings] = None) -> Tuple[TodoRepository, LabelRepository]:
    """
    Construct the todo and label repositories for the configured backend.
    - memory: InMemoryTodoRepository / InMemoryLabelRepository
    - sqlite: SQLiteTodoRepository / SQLiteLabelRepository sharing one database file
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteLabelRepository, SQLiteTodoRepository

        return (
            SQLiteTodoRepository(settings.sqlite_db_path),
            SQLiteLabelRepository(settings.sqlite_db_path),
        )
    return InMemoryTodoRepository(), InMemoryLabelRepository()
