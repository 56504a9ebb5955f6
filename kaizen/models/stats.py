"""Statistics response models."""
import datetime

from pydantic import BaseModel


class ProjectTime(BaseModel):
    """Tracked time for one project."""

    id: str
    name: str
    color: str
    total_time: int
    percentage: float


class DailyTime(BaseModel):
    date: datetime.date
    total_time: int


class WeeklyTime(BaseModel):
    week_start: datetime.date
    total_time: int


class MonthlyTime(BaseModel):
    month: datetime.date
    total_time: int


class UserStats(BaseModel):
    """Rollups of closed time entries, all values in seconds."""

    total_tracked_time: int
    project_stats: list[ProjectTime]
    daily_stats: list[DailyTime]
    weekly_stats: list[WeeklyTime]
    monthly_stats: list[MonthlyTime]
