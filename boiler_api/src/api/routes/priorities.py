from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from src.core.deps import get_priority_repository, require_admin
from src.db.models.todo import Priority
from src.repositories.todo import PriorityRepository
from src.schemas.common import MessageResponse
from src.schemas.todo import PriorityCreate, PriorityRead, PriorityUpdate

router = APIRouter(prefix="/priorities", tags=["Priorities"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[PriorityRead],
    summary="List priorities",
    description="List priorities ordered by rank.",
)
def list_priorities(repo: PriorityRepository = Depends(get_priority_repository)) -> List[PriorityRead]:
    rows = sorted(repo.all(), key=lambda p: (p.rank, p.name))
    return [PriorityRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.get(
    "/{priority_id}",
    response_model=PriorityRead,
    summary="Get priority",
)
def get_priority(
    priority_id: int = Path(..., ge=1),
    repo: PriorityRepository = Depends(get_priority_repository),
) -> PriorityRead:
    priority = repo.get_by_id(priority_id)
    if not priority:
        raise HTTPException(status_code=404, detail="Priority not found")
    return PriorityRead.model_validate(priority)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=PriorityRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create priority",
    description="Create a priority. Requires an admin profile.",
    dependencies=[Depends(require_admin)],
)
def create_priority(
    payload: PriorityCreate,
    repo: PriorityRepository = Depends(get_priority_repository),
) -> PriorityRead:
    if repo.single_or_default(Priority.name == payload.name) is not None:
        raise HTTPException(status_code=400, detail="Priority with this name already exists")
    new_id = repo.insert(Priority(**payload.model_dump()))
    return PriorityRead.model_validate(repo.get_by_id(new_id))


# PUBLIC_INTERFACE
@router.put(
    "/{priority_id}",
    response_model=PriorityRead,
    summary="Update priority",
    description="Update a priority. Requires an admin profile.",
    dependencies=[Depends(require_admin)],
)
def update_priority(
    payload: PriorityUpdate,
    priority_id: int = Path(..., ge=1),
    repo: PriorityRepository = Depends(get_priority_repository),
) -> PriorityRead:
    repo.update(Priority(id=priority_id, **payload.model_dump(exclude_unset=True)))
    return PriorityRead.model_validate(repo.get_by_id(priority_id))


# PUBLIC_INTERFACE
@router.delete(
    "/{priority_id}",
    response_model=MessageResponse,
    summary="Delete priority",
    description="Delete a priority. Requires an admin profile.",
    dependencies=[Depends(require_admin)],
)
def delete_priority(
    priority_id: int = Path(..., ge=1),
    repo: PriorityRepository = Depends(get_priority_repository),
) -> MessageResponse:
    repo.delete(priority_id)
    return MessageResponse(message="Deleted", details={"id": priority_id})
