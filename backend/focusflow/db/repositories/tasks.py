"""Task and subtask repository"""

from typing import List, Optional
from datetime import datetime, UTC
from sqlalchemy import asc, desc, func
from sqlalchemy.orm import Session, selectinload
from focusflow.schemas.tasks import TaskCreate, SubtaskCreate
from focusflow.db.models import Task, Subtask
from focusflow.core.task_utils import SORT_FIELDS


def create_task(db: Session, task: TaskCreate, user_id: int) -> Task:
    """Create a task with any inline subtasks"""
    db_task = Task(
        user_id=user_id,
        title=task.title,
        description=task.description,
        due_date=task.due_date,
        priority=task.priority,
    )
    for index, subtask in enumerate(task.subtasks):
        db_task.subtasks.append(
            Subtask(
                title=subtask.title,
                description=subtask.description,
                order=subtask.order if subtask.order is not None else index,
            )
        )
    db.add(db_task)
    db.commit()
    db.refresh(db_task)
    return db_task


def get_task(
    db: Session, task_id: int, user_id: int, include_deleted: bool = False
) -> Optional[Task]:
    query = db.query(Task).filter(Task.id == task_id, Task.user_id == user_id)

    if not include_deleted:
        query = query.filter(Task.deleted_at.is_(None))

    return query.first()


def _task_ordering(sort_by: str, order: str) -> list:
    direction = asc if order == "asc" else desc
    if sort_by == "due_date":
        # Undated tasks last when ascending
        columns = [direction(Task.due_date.is_(None)), direction(Task.due_date)]
    elif sort_by == "priority":
        columns = [direction(Task.priority)]
    elif sort_by == "title":
        columns = [direction(func.lower(Task.title))]
    else:
        columns = [direction(Task.created_at)]
    return columns + [Task.created_at.desc(), Task.id.desc()]


def get_tasks(
    db: Session,
    user_id: int,
    completed: Optional[bool] = None,
    skip: int = 0,
    limit: Optional[int] = 100,
    sort_by: str = "created_at",
    order: str = "desc",
) -> List[Task]:
    """Get the user's live tasks, newest first unless sorted otherwise"""
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"Cannot sort tasks by {sort_by!r}")

    query = (
        db.query(Task)
        .options(selectinload(Task.subtasks))
        .filter(Task.user_id == user_id, Task.deleted_at.is_(None))
    )

    if completed is not None:
        query = query.filter(Task.completed == completed)

    query = query.order_by(*_task_ordering(sort_by, order)).offset(skip)
    if limit is None:
        return query.all()
    return query.limit(limit).all()


def update_task(
    db: Session, task_id: int, user_id: int, task_update: dict
) -> Optional[Task]:
    """Update a task; completed_at follows the completed flag"""
    db_task = get_task(db, task_id, user_id)
    if not db_task:
        return None

    was_completed = db_task.completed
    for key, value in task_update.items():
        setattr(db_task, key, value)

    if db_task.completed and not was_completed:
        db_task.completed_at = datetime.now(UTC)
    elif was_completed and not db_task.completed:
        db_task.completed_at = None  # type: ignore

    db.commit()
    db.refresh(db_task)
    return db_task


def delete_task(
    db: Session, task_id: int, user_id: int, soft_delete: bool = True
) -> bool:
    db_task = get_task(db, task_id, user_id)
    if not db_task:
        return False

    if soft_delete:
        db_task.deleted_at = datetime.now(UTC)  # type: ignore
    else:
        db.delete(db_task)
    db.commit()
    return True


def restore_task(db: Session, task_id: int, user_id: int) -> Optional[Task]:
    """Restore a soft-deleted task"""
    db_task = get_task(db, task_id, user_id, include_deleted=True)
    if not db_task:
        return None

    db_task.deleted_at = None  # type: ignore
    db.commit()
    db.refresh(db_task)
    return db_task


def count_completed_tasks(
    db: Session, user_id: int, start_date: datetime, end_date: datetime
) -> int:
    return (
        db.query(Task)
        .filter(
            Task.user_id == user_id,
            Task.deleted_at.is_(None),
            Task.completed.is_(True),
            Task.completed_at >= start_date,
            Task.completed_at <= end_date,
        )
        .count()
    )


def create_subtask(db: Session, subtask: SubtaskCreate) -> Subtask:
    db_subtask = Subtask(**subtask.model_dump())
    db.add(db_subtask)
    db.commit()
    db.refresh(db_subtask)
    return db_subtask


def get_subtask(db: Session, subtask_id: int, user_id: int) -> Optional[Subtask]:
    """Get a subtask whose parent task belongs to the user"""
    return (
        db.query(Subtask)
        .join(Task, Subtask.task_id == Task.id)
        .filter(
            Subtask.id == subtask_id,
            Task.user_id == user_id,
            Task.deleted_at.is_(None),
        )
        .first()
    )


def update_subtask(
    db: Session, subtask_id: int, user_id: int, subtask_update: dict
) -> Optional[Subtask]:
    db_subtask = get_subtask(db, subtask_id, user_id)
    if not db_subtask:
        return None

    for key, value in subtask_update.items():
        setattr(db_subtask, key, value)

    db.commit()
    db.refresh(db_subtask)
    return db_subtask


def delete_subtask(db: Session, subtask_id: int, user_id: int) -> bool:
    db_subtask = get_subtask(db, subtask_id, user_id)
    if not db_subtask:
        return False

    db.delete(db_subtask)
    db.commit()
    return True


def add_subtasks(db: Session, task: Task, items: List[tuple]) -> List[Subtask]:
    """Append ``(title, description)`` items after the task's last subtask"""
    next_order = max((subtask.order for subtask in task.subtasks), default=-1) + 1
    created = []
    for offset, (title, description) in enumerate(items):
        db_subtask = Subtask(
            title=title, description=description, order=next_order + offset
        )
        task.subtasks.append(db_subtask)
        created.append(db_subtask)
    db.commit()
    for db_subtask in created:
        db.refresh(db_subtask)
    return created
