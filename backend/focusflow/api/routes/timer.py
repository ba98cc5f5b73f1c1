"""Live focus timer routes.

Each user has one in-memory timer. These endpoints drive it; the sessions it
records are exposed separately under ``/timers``.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from focusflow.db.database import get_db
from focusflow.core.auth import get_current_user
from focusflow.core.coach import suggest_for_mood
from focusflow.core.registry import TimerRegistry, get_timer_registry
from focusflow.core.stats import format_time
from focusflow.core.timer import (
    ConfigurationError,
    InvalidTransitionError,
    TimerMachine,
    TimerSnapshot,
    TimerState,
)
from focusflow.db.repositories import tasks as tasks_repository
from focusflow.schemas.timers import (
    TimerBreakRequest,
    TimerMoodRequest,
    TimerStartRequest,
    TimerStatus,
    TimerWarning,
)
from focusflow.schemas.users import User

router = APIRouter(prefix="/timer", tags=["timer"])


def get_user_timer(
    current_user: User = Depends(get_current_user),
    registry: TimerRegistry = Depends(get_timer_registry),
) -> TimerMachine:
    try:
        return registry.get(current_user.id)
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc


def _status(
    machine: TimerMachine,
    snapshot: Optional[TimerSnapshot] = None,
    feedback: Optional[str] = None,
) -> TimerStatus:
    snapshot = snapshot or machine.snapshot()
    return TimerStatus(
        state=snapshot.state.value,
        mode=snapshot.mode.value,
        is_running=snapshot.is_running,
        is_break=snapshot.mode.is_break,
        remaining_seconds=snapshot.remaining_seconds,
        duration_seconds=snapshot.duration_seconds,
        formatted_time=format_time(snapshot.remaining_seconds),
        completed_work_count=snapshot.completed_work_count,
        task_id=snapshot.task_id,
        started_at=snapshot.started_at,
        warnings=[
            TimerWarning(
                operation=warning.operation,
                message=warning.message,
                occurred_at=warning.occurred_at,
            )
            for warning in machine.drain_warnings()
        ],
        feedback=feedback,
    )


def _conflict(exc: InvalidTransitionError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get("", response_model=TimerStatus)
def read_timer(machine: TimerMachine = Depends(get_user_timer)):
    """Current timer state"""
    return _status(machine)


@router.post("/start", response_model=TimerStatus)
def start_timer(
    request: Optional[TimerStartRequest] = None,
    machine: TimerMachine = Depends(get_user_timer),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Start the current phase, or resume it when paused"""
    task_id = request.task_id if request else None
    if task_id is not None and not tasks_repository.get_task(
        db, task_id, current_user.id
    ):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Task not found"
        )

    try:
        snapshot = machine.start(task_id)
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return _status(machine, snapshot)


@router.post("/pause", response_model=TimerStatus)
def pause_timer(machine: TimerMachine = Depends(get_user_timer)):
    try:
        snapshot = machine.pause()
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return _status(machine, snapshot)


@router.post("/skip", response_model=TimerStatus)
def skip_timer(machine: TimerMachine = Depends(get_user_timer)):
    """Move on to the next phase without credit"""
    try:
        snapshot = machine.skip()
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return _status(machine, snapshot)


@router.post("/complete", response_model=TimerStatus)
def complete_timer(machine: TimerMachine = Depends(get_user_timer)):
    """Finish the current phase now, with credit"""
    try:
        snapshot = machine.complete()
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return _status(machine, snapshot)


@router.post("/reset", response_model=TimerStatus)
def reset_timer(machine: TimerMachine = Depends(get_user_timer)):
    return _status(machine, machine.reset())


@router.post("/break", response_model=TimerStatus)
def start_break(
    request: Optional[TimerBreakRequest] = None,
    machine: TimerMachine = Depends(get_user_timer),
):
    """Abandon the current work phase and start a break right away"""
    try:
        snapshot = machine.start_break(is_long=request.is_long if request else False)
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return _status(machine, snapshot)


@router.post("/mood", response_model=TimerStatus)
def check_in_mood(
    request: TimerMoodRequest, machine: TimerMachine = Depends(get_user_timer)
):
    """Record a mood check-in; an idle timer adopts the suggested length"""
    duration, feedback = suggest_for_mood(request.mood)
    snapshot = None
    if machine.state is TimerState.IDLE:
        try:
            snapshot = machine.prime(duration)
        except InvalidTransitionError:
            # Started between the check and the call; keep the running phase
            snapshot = None
    return _status(machine, snapshot, feedback=feedback)
