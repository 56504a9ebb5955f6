"""Task model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TaskCreate(BaseModel):
    """Task creation model."""

    project_id: str
    name: str = Field(min_length=1)
    description: str = ""


class TaskUpdate(BaseModel):
    """Task update model - all fields optional."""

    project_id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    is_completed: Optional[bool] = None


class Task(BaseModel):
    """Full task model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    project_id: str
    name: str
    description: str = ""
    is_completed: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
