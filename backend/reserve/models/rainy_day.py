"""
Rainy day log model: one row per surfaced (or failed) round.
"""
from sqlalchemy import Column, String, Text, Integer, ForeignKey
from sqlalchemy.orm import relationship
from reserve.db.base import BaseModel

RATING_LOVED = 2
RATING_HELPFUL = 1
RATING_NOT_HELPFUL = -1
VALID_RATINGS = (RATING_LOVED, RATING_HELPFUL, RATING_NOT_HELPFUL)


class RainyDayLog(BaseModel):
    """Log of a rainy day round and the feedback given on it."""
    __tablename__ = "rainy_day_logs"
    
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    emotion = Column(String(100), nullable=False)
    deposit_id = Column(String(36), ForeignKey("deposits.id"), nullable=True, index=True)  # Null when nothing was eligible
    rating = Column(Integer, nullable=True)  # 2 loved, 1 helpful, -1 not helpful
    feedback_note = Column(Text, nullable=True)
    
    # Relationships
    user = relationship("User", back_populates="rainy_day_logs")
    deposit = relationship("Deposit", back_populates="rainy_day_logs")
