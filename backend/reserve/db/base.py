"""
Declarative base and common columns for all models.
"""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import declarative_base
from reserve.core.utils import generate_id, utcnow

Base = declarative_base()

# Microsecond precision on MySQL so newest-first ordering does not tie within a second
Timestamp = DateTime().with_variant(mysql.DATETIME(fsp=6), "mysql")


class BaseModel(Base):
    """Abstract model with an opaque id and audit timestamps."""
    __abstract__ = True
    
    id = Column(String(36), primary_key=True, default=generate_id)
    created_at = Column(Timestamp, default=utcnow, nullable=False, index=True)
    updated_at = Column(Timestamp, default=utcnow, onupdate=utcnow, nullable=False)
