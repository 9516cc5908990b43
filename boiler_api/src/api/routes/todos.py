from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from src.core.deps import get_todo_repository
from src.db.models.todo import Todo
from src.repositories.todo import TodoRepository
from src.schemas.common import MessageResponse
from src.schemas.todo import TodoCreate, TodoRead, TodoUpdate

router = APIRouter(prefix="/todos", tags=["Todos"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoRead],
    summary="List todos",
    description="List todos, optionally filtered by completion flag and priority.",
)
def list_todos(
    repo: TodoRepository = Depends(get_todo_repository),
    done: bool | None = Query(None, description="Filter by completion flag"),
    priority_id: int | None = Query(None, description="Filter by priority id"),
) -> List[TodoRead]:
    filters: Dict[str, Any] = {}
    if done is not None:
        filters["done"] = done
    if priority_id is not None:
        filters["priority_id"] = priority_id
    rows = repo.where_by(**filters) if filters else repo.all()
    return [TodoRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoRead,
    summary="Get todo",
)
def get_todo(
    todo_id: int = Path(..., ge=1),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoRead:
    todo = repo.get_by_id(todo_id)
    if not todo:
        raise HTTPException(status_code=404, detail="Todo not found")
    return TodoRead.model_validate(todo)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create todo",
    description="Create a todo stamped with the current user as creator.",
)
def create_todo(
    payload: TodoCreate,
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoRead:
    new_id = repo.insert(Todo(**payload.model_dump()))
    return TodoRead.model_validate(repo.get_by_id(new_id))


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoRead,
    summary="Update todo",
    description="Update the fields present in the payload; creation stamps are kept.",
)
def update_todo(
    payload: TodoUpdate,
    todo_id: int = Path(..., ge=1),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoRead:
    repo.update(Todo(id=todo_id, **payload.model_dump(exclude_unset=True)))
    return TodoRead.model_validate(repo.get_by_id(todo_id))


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=MessageResponse,
    summary="Delete todo",
)
def delete_todo(
    todo_id: int = Path(..., ge=1),
    repo: TodoRepository = Depends(get_todo_repository),
) -> MessageResponse:
    repo.delete(todo_id)
    return MessageResponse(message="Deleted", details={"id": todo_id})
