from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime


class SubtaskBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    completed: bool = False
    order: int = 0


class SubtaskCreate(SubtaskBase):
    task_id: int


class SubtaskInline(BaseModel):
    """Subtask supplied together with a new task"""

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    order: Optional[int] = None


class SubtaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    completed: Optional[bool] = None
    order: Optional[int] = None


class Subtask(SubtaskBase):
    id: int
    task_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TaskBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: int = Field(2, ge=1, le=3)


class TaskCreate(TaskBase):
    subtasks: List[SubtaskInline] = []


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[int] = Field(None, ge=1, le=3)
    completed: Optional[bool] = None


class Task(TaskBase):
    id: int
    user_id: int
    completed: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    subtasks: List[Subtask] = []
    progress: int = 0  # percent of subtasks completed

    model_config = ConfigDict(from_attributes=True)


class SubtaskSuggestion(BaseModel):
    title: str
    description: str
    order: int


class BreakdownRequest(BaseModel):
    """Ask for breakdown steps, optionally adding some of them as subtasks"""

    add: bool = False
    # Titles to add; every suggestion when omitted
    titles: Optional[List[str]] = None


class BreakdownResult(BaseModel):
    suggestions: List[SubtaskSuggestion] = []
    created: List[Subtask] = []
