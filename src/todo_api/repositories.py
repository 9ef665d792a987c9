from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from threading import RLock
from typing import List, Optional

from bson import ObjectId

from .errors import InvalidTodoId
from .models import TodoEntity, TodoFields
from .settings import Settings

logger = logging.getLogger(__name__)


def parse_todo_id(todo_id: str) -> ObjectId:
    """
    Convert a path id into an ObjectId.

    Raises:
        InvalidTodoId: if the id is not a 24 character hex string.
    """
    if not ObjectId.is_valid(todo_id):
        raise InvalidTodoId(todo_id)
    return ObjectId(todo_id)


# PUBLIC_INTERFACE
class TodoStore(ABC):
    """Abstract store contract for todo persistence backends."""

    name: str = "abstract"

    def open(self) -> None:
        """Acquire backend resources. Called once at application startup."""

    def close(self) -> None:
        """Release backend resources. Called once at application shutdown."""

    def is_ready(self) -> bool:
        """Return True when the backend can currently serve requests."""
        return True

    @abstractmethod
    def find_all(self) -> List[TodoEntity]:
        """Return every stored TodoEntity."""

    @abstractmethod
    def find_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        """Return a TodoEntity by id, or None if not found. Raises InvalidTodoId on a malformed id."""

    @abstractmethod
    def create(self, doc: TodoFields) -> TodoEntity:
        """Create and return a new TodoEntity with its assigned id."""

    @abstractmethod
    def update_by_id(self, todo_id: str, patch: TodoFields) -> Optional[TodoEntity]:
        """Replace title/done of an existing TodoEntity. Return the updated entity or None if not found."""

    @abstractmethod
    def delete_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        """Delete a TodoEntity by id. Return the deleted entity or None if not found."""


class InMemoryTodoStore(TodoStore):
    """
    Thread-safe in-memory store suitable for testing and default runtime.
    """

    name = "memory"

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[str, TodoEntity] = {}

    def find_all(self) -> List[TodoEntity]:
        with self._lock:
            return [t.copy() for t in self._items.values()]

    def find_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        key = str(parse_todo_id(todo_id))
        with self._lock:
            item = self._items.get(key)
            return None if item is None else item.copy()

    def create(self, doc: TodoFields) -> TodoEntity:
        entity: TodoEntity = {
            "id": str(ObjectId()),
            "title": doc["title"],
            "done": doc["done"],
        }
        with self._lock:
            self._items[entity["id"]] = entity
        logger.debug("Created todo %s", entity["id"])
        return entity.copy()

    def update_by_id(self, todo_id: str, patch: TodoFields) -> Optional[TodoEntity]:
        key = str(parse_todo_id(todo_id))
        with self._lock:
            existing = self._items.get(key)
            if existing is None:
                return None
            updated: TodoEntity = {"id": key, "title": patch["title"], "done": patch["done"]}
            self._items[key] = updated
            return updated.copy()

    def delete_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        key = str(parse_todo_id(todo_id))
        with self._lock:
            removed = self._items.pop(key, None)
        if removed is not None:
            logger.debug("Deleted todo %s", key)
        return removed


# PUBLIC_INTERFACE
def build_store(settings: Settings) -> TodoStore:
    """
    Factory to return the configured store based on settings.
    - memory: InMemoryTodoStore
    - mongo: MongoTodoStore over a MongoConnection
    """
    if settings.persistence_backend == "mongo":
        from .db import MongoConnection, MongoTodoStore

        connection = MongoConnection(
            settings.mongodb_uri,
            settings.mongodb_database,
            timeout_ms=settings.mongodb_timeout_ms,
        )
        return MongoTodoStore(connection, settings.mongodb_collection)
    return InMemoryTodoStore()
