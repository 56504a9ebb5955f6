"""Time entry model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TimeEntryCreate(BaseModel):
    """
    Time entry creation model.

    Without ``end_time`` the entry is open (a running timer). ``duration``
    is only honoured together with ``manual_duration``.
    """

    task_id: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, ge=0)
    description: str = ""
    manual_duration: bool = False


class TimeEntryUpdate(BaseModel):
    """Time entry patch - all fields optional."""

    task_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None
    manual_duration: bool = False


class TimeEntry(BaseModel):
    """Full time entry model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    task_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[int] = None  # seconds, None while open
    description: str = ""
    created_at: datetime
    updated_at: datetime

    # Display metadata joined from the task and project
    task_name: Optional[str] = None
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    project_color: Optional[str] = None

    model_config = {"populate_by_name": True}

    @property
    def is_open(self) -> bool:
        """True while the entry is a running timer."""
        return self.end_time is None
