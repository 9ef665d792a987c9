from __future__ import annotations


class TodoValidationError(ValueError):
    """
    A Todo payload failed validation before reaching the store.

    The message follows the document store's validation format, e.g.
    "Todo validation failed: done: Path `done` is required."
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidTodoId(LookupError):
    """The given id cannot identify any Todo (malformed identifier)."""

    def __init__(self, todo_id: str) -> None:
        super().__init__(f"Invalid todo id: {todo_id!r}")
        self.todo_id = todo_id


class StoreUnavailableError(RuntimeError):
    """The store has no usable connection."""


class ForwardedError(Exception):
    """
    Carries an unhandled controller error to the app-level error translator.

    The original error is kept untouched on ``error``; its message becomes the
    response body.
    """

    def __init__(self, error: BaseException) -> None:
        super().__init__(error_message(error))
        self.error = error


# PUBLIC_INTERFACE
def error_message(error: BaseException) -> str:
    """Return the human readable message of an error, as sent to clients."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    # pymongo errors carry their message in args like any other exception
    return str(error) or error.__class__.__name__
