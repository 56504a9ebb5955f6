"""User model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class Theme(str, Enum):
    """UI themes."""

    LIGHT = "light"
    DARK = "dark"


class HourFormat(str, Enum):
    """Clock display formats."""

    H12 = "12h"
    H24 = "24h"


class UserSettings(BaseModel):
    """Per-user display preferences."""

    theme: Theme = Theme.LIGHT
    hour_format: HourFormat = HourFormat.H24
    week_start: int = Field(default=1, ge=0, le=6)  # 0 = Sunday
    notification_enabled: bool = True


class UserSettingsUpdate(BaseModel):
    """Settings update model - all fields optional."""

    theme: Optional[Theme] = None
    hour_format: Optional[HourFormat] = None
    week_start: Optional[int] = Field(default=None, ge=0, le=6)
    notification_enabled: Optional[bool] = None


class UserBase(BaseModel):
    """Base user fields."""

    email: EmailStr
    name: str


class UserCreate(UserBase):
    """User creation model with password."""

    password: str


class UserUpdate(BaseModel):
    """Profile update model."""

    email: Optional[EmailStr] = None
    name: Optional[str] = None


class User(UserBase):
    """User model without password (for API responses)."""

    id: str = Field(alias="_id", serialization_alias="id")
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
