"""
Pydantic schemas for rainy day logs and sessions.
"""
from pydantic import Field, StrictInt, field_validator
from typing import List, Optional
from datetime import datetime
from reserve.core.config import settings
from reserve.schemas.base import CamelModel
from reserve.schemas.deposit import DepositResponse
from reserve.services.rainy_day_service import SessionOutcome


def _emotion_not_blank(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Emotion is required")
    return v


class RainyDayLogCreate(CamelModel):
    """Schema for rainy day log creation."""
    emotion: str = Field(..., max_length=100)
    deposit_id: Optional[str] = None
    
    @field_validator("emotion")
    @classmethod
    def emotion_not_blank(cls, v: str) -> str:
        return _emotion_not_blank(v)


class FeedbackUpdate(CamelModel):
    """Schema for rating / note feedback on a log."""
    rating: Optional[StrictInt] = None
    feedback_note: Optional[str] = None


class RainyDayLogResponse(CamelModel):
    """Schema for rainy day log response."""
    id: str
    emotion: str
    deposit_id: Optional[str] = None
    rating: Optional[int] = None
    feedback_note: Optional[str] = None
    created_at: datetime


class SessionState(CamelModel):
    """Caller-held state of a rainy day session, echoed on every round."""
    target: int = Field(1, ge=1)
    shown: int = Field(0, ge=0)
    thumbs_up: int = Field(0, ge=0)
    exclude_ids: List[str] = []


class SessionStartRequest(CamelModel):
    """Schema for starting a rainy day session."""
    emotion: str = Field(..., max_length=100)
    target: Optional[int] = Field(None, ge=1, le=settings.MAX_MOMENT_COUNT)
    
    @field_validator("emotion")
    @classmethod
    def emotion_not_blank(cls, v: str) -> str:
        return _emotion_not_blank(v)


class SessionRateRequest(CamelModel):
    """Schema for rating the deposit shown in the current round."""
    session: SessionState
    log_id: str
    rating: StrictInt
    feedback_note: Optional[str] = None


class SessionNextRequest(CamelModel):
    """Schema for requesting the next round."""
    emotion: str = Field(..., max_length=100)
    session: SessionState
    
    @field_validator("emotion")
    @classmethod
    def emotion_not_blank(cls, v: str) -> str:
        return _emotion_not_blank(v)


class SessionStepResponse(CamelModel):
    """Schema for the result of one session call."""
    state: SessionOutcome
    session: SessionState
    deposit: Optional[DepositResponse] = None
    log_id: Optional[str] = None
