"""Subtask routes"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from focusflow.db.database import get_db
from focusflow.core.auth import get_current_user
from focusflow.schemas.tasks import Subtask, SubtaskCreate, SubtaskUpdate
from focusflow.db.repositories import tasks as tasks_repository
from focusflow.schemas.users import User

router = APIRouter(prefix="/subtasks", tags=["subtasks"])


@router.post("/", response_model=Subtask, status_code=status.HTTP_201_CREATED)
def create_subtask(
    subtask: SubtaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = tasks_repository.get_task(db, subtask.task_id, current_user.id)
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Task not found"
        )
    return tasks_repository.create_subtask(db, subtask)


@router.get("/{subtask_id}", response_model=Subtask)
def read_subtask(
    subtask_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    subtask = tasks_repository.get_subtask(db, subtask_id, current_user.id)
    if not subtask:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Subtask not found"
        )
    return subtask


@router.patch("/{subtask_id}", response_model=Subtask)
def update_subtask(
    subtask_id: int,
    subtask_update: SubtaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    subtask = tasks_repository.update_subtask(
        db, subtask_id, current_user.id, subtask_update.model_dump(exclude_unset=True)
    )
    if not subtask:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Subtask not found"
        )
    return subtask


@router.delete("/{subtask_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subtask(
    subtask_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not tasks_repository.delete_subtask(db, subtask_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Subtask not found"
        )
