from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import TodoValidationError
from .models import TodoFields

_MODEL_NAME = "Todo"

# Type names used in cast failure messages, keyed by target field
_CAST_TARGETS = {"title": "string", "done": "Boolean"}

_INPUT_TYPE_NAMES = {
    str: "string",
    bool: "boolean",
    int: "number",
    float: "number",
    list: "Array",
    dict: "Object",
}


# PUBLIC_INTERFACE
class TodoIn(BaseModel):
    """
    Schema for the payload of create and update (full replace) requests.
    Both fields are required; there is no default for `done`.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "done": False,
            }
        },
    )

    title: str = Field(..., description="Short title for the todo item", min_length=1)
    done: bool = Field(..., description="Completion status flag")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "65f1c2a4e13b7a0c9d8e4f21",
                "title": "Buy groceries",
                "done": False,
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    done: bool = Field(..., description="Completion status flag")


# PUBLIC_INTERFACE
class ErrorOut(BaseModel):
    """Body of every error response."""

    message: str = Field(..., description="Error message")


def _field_path(loc: Any) -> str:
    return ".".join(str(part) for part in loc) if loc else "body"


def _describe(error: Dict[str, Any]) -> str:
    """Render one pydantic error as '<path>: <reason>'."""
    path = _field_path(error.get("loc"))
    value = error.get("input")
    if error["type"] in {"missing", "string_too_short"} or value is None:
        return f"{path}: Path `{path}` is required."
    target = _CAST_TARGETS.get(path, "value")
    type_name = _INPUT_TYPE_NAMES.get(type(value), type(value).__name__)
    return f'{path}: Cast to {target} failed for value "{value}" (type {type_name}) at path "{path}"'


def format_validation_error(exc: ValidationError) -> str:
    """Build the single-line message for a failed Todo validation."""
    reasons = [_describe(err) for err in exc.errors()]
    return f"{_MODEL_NAME} validation failed: " + ", ".join(reasons)


# PUBLIC_INTERFACE
def validate_todo(payload: Optional[Mapping[str, Any]]) -> TodoFields:
    """
    Validate a raw request payload into the fields of a Todo.

    Raises:
        TodoValidationError: when a field is missing, empty or of the wrong type.
    """
    try:
        todo = TodoIn.model_validate(dict(payload or {}))
    except ValidationError as exc:
        raise TodoValidationError(format_validation_error(exc)) from exc
    return {"title": todo.title, "done": todo.done}


def serialize_todo(item: Mapping[str, Any]) -> Dict[str, Any]:
    """Dump a store document through TodoOut so the wire shape stays fixed."""
    return TodoOut.model_validate(dict(item)).model_dump()


def serialize_todos(items: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_todo(item) for item in items]
