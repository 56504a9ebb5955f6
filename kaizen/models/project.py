"""Project model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class ProjectBase(BaseModel):
    """Base project fields."""

    name: str = Field(min_length=1)
    description: str = ""
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)


class ProjectCreate(ProjectBase):
    """Project creation model. Color falls back to the configured default."""

    pass


class ProjectUpdate(BaseModel):
    """Project update model - all fields optional."""

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    is_active: Optional[bool] = None


class Project(BaseModel):
    """Full project model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    name: str
    description: str = ""
    color: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
