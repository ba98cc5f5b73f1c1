"""Statistics and coaching schemas"""

from typing import List, Optional
from datetime import date, datetime
from pydantic import BaseModel, Field


class ProductiveDay(BaseModel):
    day: str
    minutes: int


class DailyStat(BaseModel):
    day: date
    focus_minutes: int
    completed_pomodoros: int


class UserStats(BaseModel):
    """Progress over a date range"""

    completed_pomodoros: int
    total_focus_time: int  # seconds
    total_focus_time_display: str
    completed_tasks: int
    current_streak: int
    longest_streak: int
    average_session_minutes: int
    most_productive_day: ProductiveDay
    daily: List[DailyStat] = []
    last_active: Optional[datetime] = None
    daily_goal: int
    goal_progress: int  # percent of the daily goal reached


class ChatRequest(BaseModel):
    message: str = Field(..., max_length=2000)


class ChatReply(BaseModel):
    reply: str
    topic: str
