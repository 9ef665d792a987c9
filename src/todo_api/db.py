from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from pymongo import MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from .errors import StoreUnavailableError
from .models import TodoEntity, TodoFields
from .repositories import TodoStore, parse_todo_id

logger = logging.getLogger(__name__)


def _redact(uri: str) -> str:
    """Hide credentials of a mongodb:// URI before logging it."""
    scheme, sep, rest = uri.partition("://")
    if not sep or "@" not in rest:
        return uri
    return f"{scheme}://***@{rest.rsplit('@', 1)[1]}"


class MongoConnection:
    """
    Process-wide MongoDB client handle.

    The handle is created once at startup. A failed ``connect()`` is logged and
    the process keeps running; ``ready`` reflects the last known connectivity so
    health checks can report a degraded service.
    """

    def __init__(self, uri: str, database: str, timeout_ms: int = 5000) -> None:
        self._uri = uri
        self._database = database
        self._timeout_ms = timeout_ms
        self._client: Optional[MongoClient] = None
        self.ready = False

    def connect(self) -> bool:
        """Create the client and ping the server. Never raises on driver errors."""
        try:
            if self._client is None:
                self._client = MongoClient(self._uri, serverSelectionTimeoutMS=self._timeout_ms)
            self._client.admin.command("ping")
        except PyMongoError as exc:
            self.ready = False
            logger.error("Error connecting to MongoDB at %s: %s", _redact(self._uri), exc)
            return False
        self.ready = True
        logger.info("Connected to MongoDB at %s (database %r)", _redact(self._uri), self._database)
        return True

    def check(self) -> bool:
        """Re-ping the server and refresh ``ready``."""
        if self._client is None:
            return self.connect()
        try:
            self._client.admin.command("ping")
        except PyMongoError as exc:
            if self.ready:
                logger.warning("Lost connection to MongoDB: %s", exc)
            self.ready = False
        else:
            self.ready = True
        return self.ready

    def collection(self, name: str) -> Collection:
        if self._client is None:
            raise StoreUnavailableError("MongoDB client is not connected")
        return self._client[self._database][name]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
        self.ready = False


def _to_entity(doc: Mapping[str, Any]) -> TodoEntity:
    return {
        "id": str(doc["_id"]),
        "title": str(doc["title"]),
        "done": bool(doc["done"]),
    }


class MongoTodoStore(TodoStore):
    """
    MongoDB store implementing the TodoStore interface.

    Update and delete use the find-and-modify primitives so a single call both
    mutates the document and tells whether anything matched.
    """

    name = "mongo"

    def __init__(self, connection: MongoConnection, collection: str = "todos") -> None:
        self._connection = connection
        self._collection_name = collection

    @property
    def _collection(self) -> Collection:
        return self._connection.collection(self._collection_name)

    def open(self) -> None:
        self._connection.connect()

    def close(self) -> None:
        self._connection.close()

    def is_ready(self) -> bool:
        return self._connection.check()

    def find_all(self) -> List[TodoEntity]:
        return [_to_entity(doc) for doc in self._collection.find({})]

    def find_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        query = {"_id": parse_todo_id(todo_id)}
        doc = self._collection.find_one(query)
        return _to_entity(doc) if doc else None

    def create(self, doc: TodoFields) -> TodoEntity:
        record = {"title": doc["title"], "done": doc["done"]}
        result = self._collection.insert_one(record)
        return _to_entity({**record, "_id": result.inserted_id})

    def update_by_id(self, todo_id: str, patch: TodoFields) -> Optional[TodoEntity]:
        query = {"_id": parse_todo_id(todo_id)}
        doc = self._collection.find_one_and_update(
            query,
            {"$set": {"title": patch["title"], "done": patch["done"]}},
            return_document=ReturnDocument.AFTER,
        )
        return _to_entity(doc) if doc else None

    def delete_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        query = {"_id": parse_todo_id(todo_id)}
        doc = self._collection.find_one_and_delete(query)
        return _to_entity(doc) if doc else None
