"""Settings schemas"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class UserSettingsBase(BaseModel):
    """Base user settings model"""

    pomodoro_duration: int = Field(1500, ge=60, le=7200)  # 25 minutes in seconds
    short_break_duration: int = Field(300, ge=60, le=3600)  # 5 minutes
    long_break_duration: int = Field(900, ge=60, le=3600)  # 15 minutes
    pomodoros_until_long_break: int = Field(4, ge=1)
    auto_start_breaks: bool = False
    auto_start_pomodoros: bool = False
    notifications: bool = True
    sound: bool = True
    theme: str = Field("system", pattern="^(system|light|dark)$")
    daily_goal: int = Field(4, ge=1)
    weekly_goal: int = Field(20, ge=1)
    task_reminders: bool = True
    break_reminders: bool = True


class UserSettingsUpdate(BaseModel):
    """User settings update model"""

    pomodoro_duration: Optional[int] = Field(None, ge=60, le=7200)
    short_break_duration: Optional[int] = Field(None, ge=60, le=3600)
    long_break_duration: Optional[int] = Field(None, ge=60, le=3600)
    pomodoros_until_long_break: Optional[int] = Field(None, ge=1)
    auto_start_breaks: Optional[bool] = None
    auto_start_pomodoros: Optional[bool] = None
    notifications: Optional[bool] = None
    sound: Optional[bool] = None
    theme: Optional[str] = Field(None, pattern="^(system|light|dark)$")
    daily_goal: Optional[int] = Field(None, ge=1)
    weekly_goal: Optional[int] = Field(None, ge=1)
    task_reminders: Optional[bool] = None
    break_reminders: Optional[bool] = None


class UserSettings(UserSettingsBase):
    """User settings model"""

    user_id: int
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
