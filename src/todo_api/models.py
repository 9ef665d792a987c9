from __future__ import annotations

from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a stored Todo document.

    Fields:
    - id: Opaque identifier assigned by the store (ObjectId hex string)
    - title: Non-empty title (trimmed on input via schemas)
    - done: Boolean completion flag
    """

    id: str
    title: str
    done: bool


class TodoFields(TypedDict):
    """The writable part of a Todo, as accepted by the store."""

    title: str
    done: bool
