from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime, UTC
from focusflow.db.database import get_db
from focusflow.core.auth import get_current_user
from focusflow.schemas.timers import (
    TimerSession,
    TimerSessionCreate,
    TimerSessionUpdate,
)
from focusflow.db.repositories import timers as timers_repository
from focusflow.db.repositories import tasks as tasks_repository
from focusflow.schemas.users import User

router = APIRouter(prefix="/timers", tags=["timers"])


@router.post("/", response_model=TimerSession, status_code=status.HTTP_201_CREATED)
def create_timer_session(
    timer_session: TimerSessionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if timer_session.task_id is not None:
        task = tasks_repository.get_task(db, timer_session.task_id, current_user.id)
        if not task:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Task not found"
            )
    if timer_session.end_time and _before(
        timer_session.end_time, timer_session.start_time
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_time must not be before start_time",
        )
    return timers_repository.create_timer_session(db, timer_session, current_user.id)


@router.get("/", response_model=List[TimerSession])
def read_timer_sessions(
    is_break: Optional[bool] = None,
    task_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return timers_repository.get_timer_sessions(
        db,
        user_id=current_user.id,
        is_break=is_break,
        task_id=task_id,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )


@router.get("/{session_id}", response_model=TimerSession)
def read_timer_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    timer_session = timers_repository.get_timer_session(
        db, session_id, current_user.id
    )
    if not timer_session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Timer session not found"
        )
    return timer_session


@router.patch("/{session_id}", response_model=TimerSession)
def update_timer_session(
    session_id: int,
    session_update: TimerSessionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update a session; setting end_time stops it"""
    existing = timers_repository.get_timer_session(db, session_id, current_user.id)
    if not existing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Timer session not found"
        )
    if session_update.end_time is not None and _before(
        session_update.end_time, existing.start_time
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_time must not be before start_time",
        )

    return timers_repository.update_timer_session(
        db, session_id, current_user.id, session_update
    )


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_timer_session(
    session_id: int,
    permanent: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    success = timers_repository.delete_timer_session(
        db, session_id, current_user.id, soft_delete=not permanent
    )
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Timer session not found"
        )


def _naive_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def _before(end_time: datetime, start_time: datetime) -> bool:
    return _naive_utc(end_time) < _naive_utc(start_time)
