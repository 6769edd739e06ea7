"""
Circle models: connections, invites, shared deposits and their usage ledger.
"""
from sqlalchemy import (
    Column, String, DateTime, Boolean, ForeignKey, UniqueConstraint, Enum as SQLEnum
)
from sqlalchemy.orm import relationship
from reserve.db.base import Base, BaseModel, Timestamp
from reserve.models.deposit import DepositContentMixin
from reserve.core.utils import generate_id, utcnow
import enum


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class ConnectionStatus(str, enum.Enum):
    """Connection status enumeration."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class InviteStatus(str, enum.Enum):
    """Invite status enumeration."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


class InviteType(str, enum.Enum):
    """How the invite is delivered."""
    PHONE = "phone"
    EMAIL = "email"
    LINK = "link"


class Connection(BaseModel):
    """One direction of a Circle connection; rows always come in pairs."""
    __tablename__ = "connections"
    
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    connected_user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(
        SQLEnum(ConnectionStatus, values_callable=_enum_values),
        default=ConnectionStatus.PENDING,
        nullable=False
    )
    accepted_at = Column(DateTime, nullable=True)
    
    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    connected_user = relationship("User", foreign_keys=[connected_user_id])
    
    # Unique constraint: one row per direction
    __table_args__ = (
        UniqueConstraint('user_id', 'connected_user_id', name='uq_connection_direction'),
    )


class CircleInvite(BaseModel):
    """Invitation code that lets another user join the sender's Circle."""
    __tablename__ = "circle_invites"
    
    sender_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    invite_type = Column(SQLEnum(InviteType, values_callable=_enum_values), nullable=False)
    invite_value = Column(String(255), nullable=True)  # Phone number or email
    invite_code = Column(String(64), unique=True, nullable=False, index=True)
    status = Column(
        SQLEnum(InviteStatus, values_callable=_enum_values),
        default=InviteStatus.PENDING,
        nullable=False
    )
    expires_at = Column(DateTime, nullable=True)
    
    # Relationships
    sender = relationship("User", foreign_keys=[sender_id])


class SharedDeposit(DepositContentMixin, BaseModel):
    """A deposit sent to a connection, surfaced only to the receiver."""
    __tablename__ = "shared_deposits"
    
    sender_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    receiver_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    
    # Relationships
    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])
    usages = relationship("SharedDepositUsage", back_populates="shared_deposit")


class SharedDepositUsage(Base):
    """Append-only record of a receiver using a shared deposit."""
    __tablename__ = "shared_deposit_usage"
    
    id = Column(String(36), primary_key=True, default=generate_id)
    shared_deposit_id = Column(String(36), ForeignKey("shared_deposits.id"), nullable=False, index=True)
    used_at = Column(Timestamp, default=utcnow, nullable=False, index=True)
    helpful = Column(Boolean, nullable=True)  # None when no feedback was given
    
    # Relationships
    shared_deposit = relationship("SharedDeposit", back_populates="usages")
