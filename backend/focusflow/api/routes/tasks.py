"""Task routes"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from focusflow.db.database import get_db
from focusflow.core.auth import get_current_user
from focusflow.core import coach
from focusflow.core.logging_config import get_logger
from focusflow.core.task_utils import SORT_FIELDS, filter_tasks_by_query, sort_tasks
from focusflow.schemas.tasks import (
    BreakdownRequest,
    BreakdownResult,
    SubtaskSuggestion,
    Task,
    TaskCreate,
    TaskUpdate,
)
from focusflow.db.repositories import tasks as tasks_repository
from focusflow.schemas.users import User

logger = get_logger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("/", response_model=Task, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a new task"""
    return tasks_repository.create_task(db, task, current_user.id)


@router.get("/", response_model=List[Task])
def read_tasks(
    completed: Optional[bool] = None,
    q: Optional[str] = None,
    sort_by: str = "created_at",
    order: str = Query("desc", pattern="^(asc|desc)$"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List live tasks, optionally searched and sorted"""
    if sort_by not in SORT_FIELDS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"sort_by must be one of: {', '.join(SORT_FIELDS)}",
        )

    if not q:
        return tasks_repository.get_tasks(
            db,
            user_id=current_user.id,
            completed=completed,
            skip=skip,
            limit=limit,
            sort_by=sort_by,
            order=order,
        )

    # Search covers subtasks too, so it runs over the whole list
    tasks = tasks_repository.get_tasks(
        db, user_id=current_user.id, completed=completed, limit=None
    )
    tasks = filter_tasks_by_query(tasks, q)
    tasks = sort_tasks(tasks, sort_by=sort_by, order=order)
    return tasks[skip : skip + limit]


@router.get("/{task_id}", response_model=Task)
def read_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get a specific task"""
    task = tasks_repository.get_task(db, task_id, current_user.id)
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Task not found"
        )
    return task


@router.put("/{task_id}", response_model=Task)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update a task (PUT method)"""
    updated_task = tasks_repository.update_task(
        db, task_id, current_user.id, task_update.model_dump(exclude_none=True)
    )
    if not updated_task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Task not found"
        )
    return updated_task


@router.patch("/{task_id}", response_model=Task)
def update_task_partial(
    task_id: int,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update a task partially (PATCH method)"""
    updated_task = tasks_repository.update_task(
        db, task_id, current_user.id, task_update.model_dump(exclude_unset=True)
    )
    if not updated_task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Task not found"
        )
    return updated_task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    permanent: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a task; soft by default"""
    success = tasks_repository.delete_task(
        db, task_id, current_user.id, soft_delete=not permanent
    )
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Task not found"
        )


@router.post("/{task_id}/restore", response_model=Task)
def restore_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Restore a soft-deleted task"""
    db_task = tasks_repository.get_task(
        db, task_id, current_user.id, include_deleted=True
    )
    if not db_task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Task not found"
        )

    if db_task.deleted_at is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Task is not deleted"
        )

    return tasks_repository.restore_task(db, task_id, current_user.id)


@router.post("/{task_id}/breakdown", response_model=BreakdownResult)
def break_down_task(
    task_id: int,
    breakdown: Optional[BreakdownRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Suggest subtasks for a task, skipping steps it already has.

    With ``add`` set, the chosen suggestions are created as subtasks and the
    rest are returned.
    """
    breakdown = breakdown or BreakdownRequest()
    db_task = tasks_repository.get_task(db, task_id, current_user.id)
    if not db_task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Task not found"
        )

    suggestions = coach.suggest_subtasks(
        subtask.title for subtask in db_task.subtasks
    )
    if not breakdown.add:
        return {"suggestions": _suggestion_models(suggestions), "created": []}

    chosen = {title for _, title, _ in suggestions}
    if breakdown.titles is not None:
        unknown = [title for title in breakdown.titles if title not in chosen]
        if unknown:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Not a current suggestion: {', '.join(unknown)}",
            )
        chosen = set(breakdown.titles)

    created = tasks_repository.add_subtasks(
        db,
        db_task,
        [
            (title, description)
            for _, title, description in suggestions
            if title in chosen
        ],
    )
    logger.info("task_breakdown_added", task_id=task_id, count=len(created))
    remaining = [item for item in suggestions if item[1] not in chosen]
    return {"suggestions": _suggestion_models(remaining), "created": created}


def _suggestion_models(suggestions) -> List[SubtaskSuggestion]:
    return [
        SubtaskSuggestion(order=order, title=title, description=description)
        for order, title, description in suggestions
    ]
