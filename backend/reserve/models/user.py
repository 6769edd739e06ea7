"""
User model for device-bound identities and per-user settings.
"""
from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.orm import relationship
from reserve.db.base import BaseModel


class User(BaseModel):
    """User model keyed by the device id that registered it."""
    __tablename__ = "users"
    
    device_id = Column(String(100), unique=True, nullable=False, index=True)
    display_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    
    # Settings
    summary_frequency_weeks = Column(Integer, default=2, nullable=False)
    rainy_day_moment_count = Column(Integer, default=1, nullable=False)
    last_summary_sent_at = Column(DateTime, nullable=True)
    
    # Relationships
    deposits = relationship("Deposit", back_populates="user", cascade="all, delete-orphan")
    rainy_day_logs = relationship("RainyDayLog", back_populates="user", cascade="all, delete-orphan")
