"""
Pydantic schemas for User entity.
"""
from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from reserve.core.config import settings
from reserve.schemas.base import CamelModel


class CurrentUserRequest(CamelModel):
    """Schema for resolving the user bound to a device."""
    device_id: str = Field(..., max_length=100)
    display_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    
    @field_validator("device_id")
    @classmethod
    def device_id_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Device ID required")
        return v


class UserSettingsUpdate(CamelModel):
    """Schema for user settings update."""
    summary_frequency_weeks: Optional[int] = Field(
        None,
        ge=settings.MIN_SUMMARY_FREQUENCY_WEEKS,
        le=settings.MAX_SUMMARY_FREQUENCY_WEEKS
    )
    rainy_day_moment_count: Optional[int] = Field(None, ge=1, le=settings.MAX_MOMENT_COUNT)
    display_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)


class UserResponse(CamelModel):
    """Schema for user response."""
    id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    summary_frequency_weeks: int
    rainy_day_moment_count: int
    last_summary_sent_at: Optional[datetime] = None
    created_at: datetime


class UserSession(CamelModel):
    """Schema for the resolved user plus bearer token."""
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
