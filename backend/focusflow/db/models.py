from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Boolean,
    CheckConstraint,
    func,
)
from sqlalchemy.orm import declarative_base, relationship
from focusflow.core.task_utils import calculate_task_progress

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    tasks = relationship("Task", back_populates="user")
    timer_sessions = relationship("TimerSession", back_populates="user")
    settings = relationship("UserSettings", back_populates="user", uselist=False)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(String(200), nullable=False)
    description = Column(Text)
    due_date = Column(DateTime(timezone=True))
    priority = Column(
        Integer, CheckConstraint("priority BETWEEN 1 AND 3"), default=2
    )  # 1 = high, 3 = low
    completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    completed_at = Column(DateTime(timezone=True))
    deleted_at = Column(DateTime(timezone=True))

    user = relationship("User", back_populates="tasks")
    subtasks = relationship(
        "Subtask",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Subtask.order",
    )
    timer_sessions = relationship("TimerSession", back_populates="task")

    @property
    def progress(self) -> int:
        return calculate_task_progress(self)


class Subtask(Base):
    __tablename__ = "subtasks"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(
        Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(String(200), nullable=False)
    description = Column(Text)
    completed = Column(Boolean, default=False, nullable=False)
    order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    task = relationship("Task", back_populates="subtasks")


class TimerSession(Base):
    __tablename__ = "timer_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="SET NULL"))
    session_type = Column(
        String(20),
        CheckConstraint("session_type IN ('work', 'short_break', 'long_break')"),
        nullable=False,
        default="work",
    )
    is_break = Column(Boolean, default=False, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True))
    duration = Column(Integer)  # Actual duration in seconds
    planned_duration = Column(Integer)  # Configured duration in seconds
    completed = Column(Boolean, default=False, nullable=False)
    skipped = Column(Boolean, default=False, nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    deleted_at = Column(DateTime(timezone=True))

    user = relationship("User", back_populates="timer_sessions")
    task = relationship("Task", back_populates="timer_sessions")

    __table_args__ = (
        CheckConstraint(
            "end_time IS NULL OR end_time >= start_time", name="valid_time_range"
        ),
    )


class UserSettings(Base):
    __tablename__ = "user_settings"

    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    pomodoro_duration = Column(Integer, default=1500)  # 25 minutes in seconds
    short_break_duration = Column(Integer, default=300)  # 5 minutes
    long_break_duration = Column(Integer, default=900)  # 15 minutes
    pomodoros_until_long_break = Column(Integer, default=4)
    auto_start_breaks = Column(Boolean, default=False)
    auto_start_pomodoros = Column(Boolean, default=False)
    notifications = Column(Boolean, default=True)
    sound = Column(Boolean, default=True)
    theme = Column(
        String(20), CheckConstraint("theme IN ('system', 'light', 'dark')"), default="system"
    )
    daily_goal = Column(Integer, default=4)  # pomodoros per day
    weekly_goal = Column(Integer, default=20)
    task_reminders = Column(Boolean, default=True)
    break_reminders = Column(Boolean, default=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user = relationship("User", back_populates="settings")
