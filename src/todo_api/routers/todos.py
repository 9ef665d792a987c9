from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from .. import controllers
from ..controllers import Result
from ..errors import ForwardedError
from ..repositories import TodoStore
from ..schemas import ErrorOut, TodoIn, TodoOut, serialize_todo, serialize_todos

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)

_payload_body = Body(
    default=None,
    description="Todo fields; both title and done are required",
    examples=[TodoIn.model_config["json_schema_extra"]["example"]],
)

_error_responses: Dict[int, Dict[str, Any]] = {
    500: {"model": ErrorOut, "description": "Validation or store failure"},
}


def get_store(request: Request) -> TodoStore:
    """
    Dependency returning the process-wide store created at startup.
    """
    return request.app.state.store


def _send(result: Result) -> Response:
    """Turn a handler Result into a response, forwarding errors to the app handler."""
    reply = result.reply
    if reply is None:
        raise ForwardedError(result.error) from result.error
    if reply.body is None:
        return Response(status_code=reply.status_code)
    if isinstance(reply.body, list):
        content: Any = serialize_todos(reply.body)
    else:
        content = serialize_todo(reply.body)
    return JSONResponse(status_code=reply.status_code, content=content)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[TodoOut],
    summary="List Todos",
    description="Return all Todo items. An empty collection yields an empty array.",
    responses={200: {"description": "List retrieved successfully"}, **_error_responses},
)
def list_todos(store: TodoStore = Depends(get_store)) -> Response:
    """
    List all todos.
    """
    return _send(controllers.list_todos(store))


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item and return the created resource.",
    responses={201: {"description": "Todo created successfully"}, **_error_responses},
)
def create_todo(
    payload: Optional[Dict[str, Any]] = _payload_body,
    store: TodoStore = Depends(get_store),
) -> Response:
    """
    Create a new Todo. A payload missing title or done is reported as a 500
    carrying the validation message.
    """
    return _send(controllers.create_todo(store, payload))


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses={
        200: {"description": "Todo found"},
        404: {"description": "Todo not found (empty body)"},
        **_error_responses,
    },
)
def get_todo(todo_id: str, store: TodoStore = Depends(get_store)) -> Response:
    """
    Retrieve a single Todo item by its ID.
    """
    return _send(controllers.get_todo(store, todo_id))


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Replace Todo",
    description="Replace title and done of an existing Todo item and return the updated resource.",
    responses={
        200: {"description": "Todo updated"},
        404: {"description": "Todo not found (empty body)"},
        **_error_responses,
    },
)
def put_todo(
    todo_id: str,
    payload: Optional[Dict[str, Any]] = _payload_body,
    store: TodoStore = Depends(get_store),
) -> Response:
    """
    Full update (replace) of a Todo item.
    """
    return _send(controllers.update_todo(store, todo_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Delete Todo",
    description="Delete a Todo item by ID and return the deleted resource.",
    responses={
        200: {"description": "Todo deleted"},
        404: {"description": "Todo not found (empty body)"},
        **_error_responses,
    },
)
def delete_todo(todo_id: str, store: TodoStore = Depends(get_store)) -> Response:
    """
    Delete a Todo. Returns 200 with the deleted item, 404 if not found.
    """
    return _send(controllers.delete_todo(store, todo_id))
