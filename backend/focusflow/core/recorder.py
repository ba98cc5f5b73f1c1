"""Database-backed collaborators of the focus timer.

``DatabaseSessionRecorder`` writes one ``TimerSession`` row per timer phase
and ``DatabaseSettingsProvider`` turns stored user settings into a
``TimerConfig``. Both open a short-lived session per call, so they are safe
to use from the recorder worker thread.
"""

from datetime import datetime
from typing import Callable, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from focusflow.core.logging_config import get_logger
from focusflow.core.timer import (
    ConfigurationError,
    RecorderError,
    TimerConfig,
    TimerMode,
)
from focusflow.db.repositories import timers as timers_repository
from focusflow.db.repositories import users as users_repository

logger = get_logger(__name__)

SessionFactory = Callable[[], Session]


class DatabaseSessionRecorder:
    def __init__(self, session_factory: SessionFactory, user_id: int):
        self._session_factory = session_factory
        self._user_id = user_id

    def start_session(
        self,
        task_id: Optional[int],
        started_at: datetime,
        mode: TimerMode,
        planned_duration_seconds: int,
    ) -> int:
        db = self._session_factory()
        try:
            timer_session = timers_repository.start_session(
                db,
                user_id=self._user_id,
                task_id=task_id,
                started_at=started_at,
                session_type=mode.value,
                planned_duration=planned_duration_seconds,
            )
            logger.debug(
                "timer_session_started",
                user_id=self._user_id,
                session_id=timer_session.id,
                session_type=mode.value,
            )
            return timer_session.id
        except SQLAlchemyError as exc:
            db.rollback()
            raise RecorderError(f"could not record session start: {exc}") from exc
        finally:
            db.close()

    def stop_session(
        self,
        session_id: int,
        ended_at: datetime,
        duration_seconds: int,
        *,
        is_break: bool,
        skipped: bool,
    ) -> None:
        db = self._session_factory()
        try:
            timer_session = timers_repository.stop_session(
                db,
                session_id,
                self._user_id,
                ended_at=ended_at,
                duration=duration_seconds,
                skipped=skipped,
            )
        except SQLAlchemyError as exc:
            db.rollback()
            raise RecorderError(f"could not record session stop: {exc}") from exc
        finally:
            db.close()

        if timer_session is None:
            raise RecorderError(f"timer session {session_id} no longer exists")
        logger.debug(
            "timer_session_stopped",
            user_id=self._user_id,
            session_id=session_id,
            is_break=is_break,
            skipped=skipped,
            duration=duration_seconds,
        )


class DatabaseSettingsProvider:
    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    def get_config(self, user_id: int) -> TimerConfig:
        """Build a timer configuration from the user's stored settings.

        Raises ``ConfigurationError`` if the user is unknown or a stored
        value is out of range.
        """
        db = self._session_factory()
        try:
            db_settings = users_repository.get_user_settings(db, user_id)
            if db_settings is None:
                raise ConfigurationError(f"no settings for user {user_id}")
            return TimerConfig(
                work_duration_seconds=db_settings.pomodoro_duration,
                short_break_duration_seconds=db_settings.short_break_duration,
                long_break_duration_seconds=db_settings.long_break_duration,
                pomodoros_before_long_break=db_settings.pomodoros_until_long_break,
                auto_start_breaks=bool(db_settings.auto_start_breaks),
                auto_start_pomodoros=bool(db_settings.auto_start_pomodoros),
            )
        finally:
            db.close()
