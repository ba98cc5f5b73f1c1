"""Progress statistics routes"""

from typing import Optional
from datetime import datetime, timedelta, UTC
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from focusflow.db.database import get_db
from focusflow.core.auth import get_current_user
from focusflow.core import stats as stats_utils
from focusflow.db.repositories import tasks as tasks_repository
from focusflow.db.repositories import timers as timers_repository
from focusflow.db.repositories import users as users_repository
from focusflow.schemas.stats import DailyStat, ProductiveDay, UserStats
from focusflow.schemas.users import User

router = APIRouter(prefix="/stats", tags=["stats"])


def _build_stats(
    db: Session, user_id: int, start_date: datetime, end_date: datetime
) -> UserStats:
    sessions = timers_repository.get_timer_sessions(
        db,
        user_id=user_id,
        is_break=False,
        start_date=start_date,
        end_date=end_date,
        limit=None,
    )
    # Streaks look at the whole history, not just the window
    history = timers_repository.get_timer_sessions(
        db, user_id=user_id, is_break=False, limit=None
    )
    completed = stats_utils.completed_work_sessions(sessions)
    focus_seconds = stats_utils.total_focus_seconds(sessions)
    best_day, best_minutes = stats_utils.most_productive_day(sessions)

    settings = users_repository.get_user_settings(db, user_id)
    daily_goal = settings.daily_goal if settings and settings.daily_goal else 4
    days = max((end_date.date() - start_date.date()).days + 1, 1)
    goal_progress = min(round(len(completed) * 100 / (daily_goal * days)), 100)

    return UserStats(
        completed_pomodoros=len(completed),
        total_focus_time=focus_seconds,
        total_focus_time_display=stats_utils.format_duration(focus_seconds),
        completed_tasks=tasks_repository.count_completed_tasks(
            db, user_id, start_date, end_date
        ),
        current_streak=stats_utils.current_streak(history),
        longest_streak=stats_utils.longest_streak(history),
        average_session_minutes=stats_utils.average_session_minutes(sessions),
        most_productive_day=ProductiveDay(day=best_day, minutes=best_minutes),
        daily=[
            DailyStat(day=day, focus_minutes=focus, completed_pomodoros=count)
            for day, focus, count in stats_utils.daily_focus(
                sessions, start_date.date(), end_date.date()
            )
        ],
        last_active=stats_utils.last_active(history),
        daily_goal=daily_goal,
        goal_progress=goal_progress,
    )


def _start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


@router.get("", response_model=UserStats)
def read_stats(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Statistics for a date range; defaults to the last 30 days"""
    end_date = end_date or datetime.now(UTC)
    start_date = start_date or _start_of_day(end_date - timedelta(days=29))
    return _build_stats(db, current_user.id, start_date, end_date)


@router.get("/today", response_model=UserStats)
def read_today_stats(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    now = datetime.now(UTC)
    return _build_stats(db, current_user.id, _start_of_day(now), now)


@router.get("/week", response_model=UserStats)
def read_week_stats(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    """Statistics since Monday"""
    now = datetime.now(UTC)
    start = _start_of_day(now - timedelta(days=now.weekday()))
    return _build_stats(db, current_user.id, start, now)
