"""
Pydantic schemas for Deposit entity.
"""
from pydantic import Field, StrictInt, field_validator, model_validator
from typing import List, Optional
from datetime import datetime
from reserve.core.config import settings
from reserve.models.deposit import DepositState, MediaType, STATUS_INACTIVE
from reserve.schemas.base import CamelModel


def _content_not_blank(v: Optional[str]) -> Optional[str]:
    if v is not None and not v.strip():
        raise ValueError("Content must not be empty")
    return v


class DepositBase(CamelModel):
    """Base deposit schema."""
    content: str
    emotion: Optional[str] = Field(None, max_length=100)
    media_uri: Optional[str] = Field(None, max_length=1000)
    media_type: Optional[MediaType] = None
    tags: List[str] = []


class DepositCreate(DepositBase):
    """Schema for deposit creation. Any client-sent status is ignored."""
    
    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        return _content_not_blank(v)
    
    @model_validator(mode="after")
    def media_uri_and_type_together(self):
        if (self.media_uri is None) != (self.media_type is None):
            raise ValueError("mediaUri and mediaType must be provided together")
        return self


class DepositUpdate(CamelModel):
    """Schema for deposit update. Only content, emotion and tags are mutable."""
    content: Optional[str] = None
    emotion: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[str]] = None
    
    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _content_not_blank(v)


class StatusUpdate(CamelModel):
    """Schema for a raw status change: -1, 0 or a cooldown in days."""
    status: StrictInt = Field(..., ge=STATUS_INACTIVE, le=settings.MAX_COOLDOWN_DAYS)


class DepositResponse(DepositBase):
    """Schema for deposit response."""
    id: str
    status: int
    state: DepositState
    last_surfaced_at: Optional[datetime] = None
    created_at: datetime


class StatsResponse(CamelModel):
    """Schema for reserve statistics."""
    total_deposits: int
    active_deposits: int
    cooldown_deposits: int
    total_rainy_days: int
    connections: int
