"""
Deposit model: a saved positive moment and its surfacing status.

The integer ``status`` column is the stored form; ``0`` is active, a
positive value is a cooldown measured in days and ``-1`` is inactive
(soft-deleted). ``DepositState`` is the tagged view of the same value.
A cooldown counts from ``cooldown_started_at``, stamped whenever one starts.
"""
from sqlalchemy import Column, String, Text, Integer, JSON, ForeignKey
from sqlalchemy.orm import relationship
from reserve.db.base import BaseModel, Timestamp
import enum

STATUS_ACTIVE = 0
STATUS_INACTIVE = -1


class DepositState(str, enum.Enum):
    """Surfacing state derived from the integer status."""
    ACTIVE = "active"
    COOLDOWN = "cooldown"
    INACTIVE = "inactive"


class MediaType(str, enum.Enum):
    """Kind of media attached to a deposit."""
    PHOTO = "photo"
    VIDEO = "video"
    AUDIO = "audio"


def state_for_status(status: int) -> DepositState:
    """Map a stored status to its state."""
    if status == STATUS_ACTIVE:
        return DepositState.ACTIVE
    if status > 0:
        return DepositState.COOLDOWN
    return DepositState.INACTIVE


class DepositContentMixin:
    """Columns shared by personal and shared deposits."""
    
    content = Column(Text, nullable=False)
    emotion = Column(String(100), nullable=True)
    media_uri = Column(String(1000), nullable=True)
    media_type = Column(String(10), nullable=True)  # photo, video, audio
    tags = Column(JSON, nullable=False, default=lambda: [])
    status = Column(Integer, default=STATUS_ACTIVE, nullable=False, index=True)
    last_surfaced_at = Column(Timestamp, nullable=True)
    cooldown_started_at = Column(Timestamp, nullable=True)  # Start of the current cooldown
    
    @property
    def state(self) -> DepositState:
        return state_for_status(self.status)


class Deposit(DepositContentMixin, BaseModel):
    """A user's own deposit."""
    __tablename__ = "deposits"
    
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    
    # Relationships
    user = relationship("User", back_populates="deposits")
    rainy_day_logs = relationship("RainyDayLog", back_populates="deposit")
