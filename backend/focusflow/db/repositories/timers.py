from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from datetime import datetime, UTC
from focusflow.schemas.timers import TimerSessionCreate, TimerSessionUpdate
from focusflow.db.models import TimerSession


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _elapsed_seconds(start_time: datetime, end_time: datetime) -> int:
    return max(int((_aware(end_time) - _aware(start_time)).total_seconds()), 0)


def create_timer_session(
    db: Session, timer_session: TimerSessionCreate, user_id: int
) -> TimerSession:
    session_type = timer_session.session_type or (
        "short_break" if timer_session.is_break else "work"
    )
    db_session = TimerSession(
        user_id=user_id,
        task_id=timer_session.task_id,
        session_type=session_type,
        is_break=session_type != "work",
        start_time=timer_session.start_time,
        end_time=timer_session.end_time,
        duration=timer_session.duration,
        planned_duration=timer_session.planned_duration,
        completed=timer_session.end_time is not None,
        notes=timer_session.notes,
    )
    db.add(db_session)
    db.commit()
    db.refresh(db_session)
    return db_session


def start_session(
    db: Session,
    user_id: int,
    task_id: Optional[int],
    started_at: datetime,
    session_type: str,
    planned_duration: Optional[int] = None,
) -> TimerSession:
    """Open a session for a timer phase that just started running"""
    db_session = TimerSession(
        user_id=user_id,
        task_id=task_id,
        session_type=session_type,
        is_break=session_type != "work",
        start_time=started_at,
        planned_duration=planned_duration,
    )
    db.add(db_session)
    db.commit()
    db.refresh(db_session)
    return db_session


def stop_session(
    db: Session,
    session_id: int,
    user_id: int,
    ended_at: datetime,
    duration: int,
    skipped: bool = False,
) -> Optional[TimerSession]:
    """Close a session; skipped sessions earn no completion credit"""
    db_session = get_timer_session(db, session_id, user_id)
    if not db_session:
        return None

    db_session.end_time = ended_at
    db_session.duration = duration
    db_session.skipped = skipped
    db_session.completed = not skipped

    db.commit()
    db.refresh(db_session)
    return db_session


def get_timer_session(
    db: Session, session_id: int, user_id: int
) -> Optional[TimerSession]:
    return (
        db.query(TimerSession)
        .options(joinedload(TimerSession.task))
        .filter(
            TimerSession.id == session_id,
            TimerSession.user_id == user_id,
            TimerSession.deleted_at.is_(None),
        )
        .first()
    )


def get_timer_sessions(
    db: Session,
    user_id: int,
    skip: int = 0,
    limit: Optional[int] = 100,
    is_break: Optional[bool] = None,
    task_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[TimerSession]:
    query = (
        db.query(TimerSession)
        .options(joinedload(TimerSession.task))
        .filter(TimerSession.user_id == user_id, TimerSession.deleted_at.is_(None))
    )

    if is_break is not None:
        query = query.filter(TimerSession.is_break == is_break)

    if task_id is not None:
        query = query.filter(TimerSession.task_id == task_id)

    if start_date:
        query = query.filter(TimerSession.start_time >= start_date)

    if end_date:
        query = query.filter(TimerSession.start_time <= end_date)

    query = query.order_by(TimerSession.start_time.desc(), TimerSession.id.desc())
    if limit is None:
        return query.offset(skip).all()
    return query.offset(skip).limit(limit).all()


def update_timer_session(
    db: Session, session_id: int, user_id: int, session_update: TimerSessionUpdate
) -> Optional[TimerSession]:
    """Update a timer session with new values"""
    db_session = get_timer_session(db, session_id, user_id)
    if not db_session:
        return None

    update_data = session_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(db_session, key, value)

    if "is_break" in update_data:
        if not db_session.is_break:
            db_session.session_type = "work"
        elif db_session.session_type == "work":
            db_session.session_type = "short_break"

    # Stopping a session without an explicit duration measures it
    if "end_time" in update_data and db_session.end_time is not None:
        db_session.completed = not db_session.skipped
        if db_session.duration is None:
            db_session.duration = _elapsed_seconds(
                db_session.start_time, db_session.end_time
            )

    db.commit()
    db.refresh(db_session)
    return db_session


def delete_timer_session(
    db: Session, session_id: int, user_id: int, soft_delete: bool = True
) -> bool:
    db_session = get_timer_session(db, session_id, user_id)
    if not db_session:
        return False

    if soft_delete:
        db_session.deleted_at = datetime.now(UTC)
    else:
        db.delete(db_session)
    db.commit()
    return True
