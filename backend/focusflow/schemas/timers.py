from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from pydantic import ConfigDict

SESSION_TYPE_PATTERN = "^(work|short_break|long_break)$"


class TimerSessionBase(BaseModel):
    task_id: Optional[int] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=0)  # Actual duration in seconds
    is_break: bool = False
    notes: Optional[str] = None


class TimerSessionCreate(TimerSessionBase):
    session_type: Optional[str] = Field(None, pattern=SESSION_TYPE_PATTERN)
    planned_duration: Optional[int] = Field(None, gt=0)


class TimerSessionUpdate(BaseModel):
    end_time: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    is_break: Optional[bool] = None


class TimerSessionTask(BaseModel):
    id: int
    title: str

    model_config = ConfigDict(from_attributes=True)


class TimerSession(TimerSessionBase):
    id: int
    user_id: int
    session_type: str
    planned_duration: Optional[int] = None
    completed: bool
    skipped: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    task: Optional[TimerSessionTask] = None

    model_config = ConfigDict(from_attributes=True)


class TimerStartRequest(BaseModel):
    task_id: Optional[int] = None


class TimerBreakRequest(BaseModel):
    is_long: bool = False


class TimerMoodRequest(BaseModel):
    mood: str = Field(..., pattern="^(energized|focused|neutral|struggling)$")


class TimerWarning(BaseModel):
    operation: str
    message: str
    occurred_at: datetime


class TimerStatus(BaseModel):
    """Current focus timer as rendered by clients"""

    state: str
    mode: str
    is_running: bool
    is_break: bool
    remaining_seconds: int
    duration_seconds: int
    formatted_time: str
    completed_work_count: int
    task_id: Optional[int] = None
    started_at: Optional[datetime] = None
    warnings: List[TimerWarning] = []
    feedback: Optional[str] = None
