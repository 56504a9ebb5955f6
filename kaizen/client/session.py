"""Cached description of the timer the client believes is running."""
from datetime import datetime

from pydantic import BaseModel, field_validator

from kaizen.utils.timeutils import ensure_utc


class TimerSession(BaseModel):
    """
    Display snapshot of a running timer.

    Holds no entry id: the open entry is always looked up on the server.
    """

    task_id: str
    task_name: str
    project_id: str
    project_name: str
    project_color: str
    start_time: datetime
    description: str = ""

    @field_validator("start_time")
    @classmethod
    def _utc_start_time(cls, value: datetime) -> datetime:
        return ensure_utc(value)
