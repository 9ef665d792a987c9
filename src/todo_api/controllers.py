"""
Request handlers for the todo routes.

Each handler performs one store call and maps its outcome onto a ``Result``:

- the store returned a document (or list): a reply with the success status
- the store returned ``None`` or rejected a malformed id: ``404`` with no body
- the store (or payload validation) raised: the error, untouched, for the
  app-level error translator
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from fastapi import status

from .errors import InvalidTodoId
from .repositories import TodoStore
from .schemas import validate_todo


@dataclass(frozen=True)
class Reply:
    """Status code and (optional) JSON body of a successful handler run."""

    status_code: int
    body: Any = None


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Result:
    """Either a Reply or an error to forward; exactly one is set."""

    reply: Optional[Reply] = None
    error: Optional[BaseException] = None

    def __post_init__(self) -> None:
        if (self.reply is None) == (self.error is None):
            raise ValueError("Result needs exactly one of reply or error")

    @classmethod
    def ok(cls, status_code: int, body: Any = None) -> "Result":
        return cls(reply=Reply(status_code, body))

    @classmethod
    def failure(cls, error: BaseException) -> "Result":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None


def _not_found() -> Result:
    return Result.ok(status.HTTP_404_NOT_FOUND)


def _found(doc: Any) -> Result:
    if doc is None:
        return _not_found()
    return Result.ok(status.HTTP_200_OK, doc)


# PUBLIC_INTERFACE
def list_todos(store: TodoStore) -> Result:
    """Return every todo; an empty store yields an empty list."""
    try:
        todos = store.find_all()
    except Exception as exc:
        return Result.failure(exc)
    return Result.ok(status.HTTP_200_OK, list(todos))


# PUBLIC_INTERFACE
def get_todo(store: TodoStore, todo_id: str) -> Result:
    try:
        todo = store.find_by_id(todo_id)
    except InvalidTodoId:
        return _not_found()
    except Exception as exc:
        return Result.failure(exc)
    return _found(todo)


# PUBLIC_INTERFACE
def create_todo(store: TodoStore, payload: Optional[Mapping[str, Any]]) -> Result:
    """Validate the payload, then create it; validation errors are forwarded."""
    try:
        created = store.create(validate_todo(payload))
    except Exception as exc:
        return Result.failure(exc)
    return Result.ok(status.HTTP_201_CREATED, created)


# PUBLIC_INTERFACE
def update_todo(store: TodoStore, todo_id: str, payload: Optional[Mapping[str, Any]]) -> Result:
    """
    Replace title and done of a todo.

    The payload is validated before the store is touched, so an invalid payload
    is reported even when the id does not exist.
    """
    try:
        patch = validate_todo(payload)
        updated = store.update_by_id(todo_id, patch)
    except InvalidTodoId:
        return _not_found()
    except Exception as exc:
        return Result.failure(exc)
    return _found(updated)


# PUBLIC_INTERFACE
def delete_todo(store: TodoStore, todo_id: str) -> Result:
    try:
        deleted = store.delete_by_id(todo_id)
    except InvalidTodoId:
        return _not_found()
    except Exception as exc:
        return Result.failure(exc)
    return _found(deleted)
