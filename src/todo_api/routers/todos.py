from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from ..repositories import Repository, get_repository
from ..schemas import ErrorEnvelope, TodoCreate, TodoEnvelope, TodoListEnvelope, TodoUpdate
from ..utils import list_envelope, todo_envelope

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
    responses={500: {"model": ErrorEnvelope, "description": "Store error"}},
)

TodoId = Annotated[
    int,
    Path(ge=-(2**63), le=2**63 - 1, description="Identifier of the todo item (64-bit integer)"),
]

_NOT_FOUND = {404: {"model": ErrorEnvelope, "description": "Todo not found"}}


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TodoListEnvelope,
    summary="List Todos",
    description="List every stored todo, oldest first.",
)
def todo_list(repo: Repository = Depends(get_repository)) -> TodoListEnvelope:
    """
    List all todos.
    """
    return list_envelope(repo.list())


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses=_NOT_FOUND,
)
def todo_read(todo_id: TodoId, repo: Repository = Depends(get_repository)) -> TodoEnvelope:
    """
    Retrieve a single Todo item by its ID. A missing id surfaces as RowNotFound (404).
    """
    return todo_envelope(repo.get(todo_id))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoEnvelope,
    status_code=status.HTTP_200_OK,
    summary="Create Todo",
    description="Create a new Todo item and return the stored resource.",
)
def todo_create(payload: TodoCreate, repo: Repository = Depends(get_repository)) -> TodoEnvelope:
    """
    Create a new Todo. Responds 200, not 201, to keep the existing contract.
    """
    return todo_envelope(repo.create(payload))


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Update Todo",
    description=(
        "Partially update a Todo item. Omitted fields keep their stored value; "
        "updated_at is refreshed on every successful call."
    ),
    responses=_NOT_FOUND,
)
@router.patch(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Patch Todo",
    description="Same partial-update semantics as PUT.",
    responses=_NOT_FOUND,
)
def todo_update(
    todo_id: TodoId,
    payload: TodoUpdate,
    repo: Repository = Depends(get_repository),
) -> TodoEnvelope:
    """
    Partial update of a Todo item.
    """
    return todo_envelope(repo.update(todo_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete Todo",
    description="Delete a Todo item by ID. Deleting an unknown id also returns 204.",
)
def todo_delete(todo_id: TodoId, repo: Repository = Depends(get_repository)) -> Response:
    """
    Delete a Todo. Idempotent: the response does not reveal whether a row existed.
    """
    repo.delete(todo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
