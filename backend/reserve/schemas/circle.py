"""
Pydantic schemas for Circle entities.
"""
from pydantic import Field, field_validator
from typing import List, Optional
from datetime import datetime
from reserve.models.circle import ConnectionStatus, InviteStatus, InviteType
from reserve.models.deposit import MediaType
from reserve.schemas.base import CamelModel
from reserve.schemas.deposit import DepositCreate, DepositResponse


class InviteCreate(CamelModel):
    """Schema for invite creation."""
    invite_type: InviteType
    invite_value: Optional[str] = Field(None, max_length=255)


class InviteResponse(CamelModel):
    """Schema for invite response."""
    id: str
    sender_id: str
    invite_type: InviteType
    invite_value: Optional[str] = None
    invite_code: str
    status: InviteStatus
    created_at: datetime
    expires_at: Optional[datetime] = None


class CircleUser(CamelModel):
    """Public view of another Circle member."""
    id: str
    display_name: Optional[str] = None


class InviteDetailResponse(InviteResponse):
    """Schema for invite lookup, including who sent it."""
    sender: Optional[CircleUser] = None


class ConnectionResponse(CamelModel):
    """Schema for connection response."""
    id: str
    user_id: str
    connected_user_id: str
    status: ConnectionStatus
    created_at: datetime
    accepted_at: Optional[datetime] = None


class ConnectionDetailResponse(ConnectionResponse):
    """Schema for a connection with the connected user's details."""
    connected_user: Optional[CircleUser] = None


class AcceptInviteResponse(CamelModel):
    """Schema for invite acceptance."""
    success: bool = True
    connection: ConnectionResponse


class SharedDepositCreate(DepositCreate):
    """Schema for sharing a deposit with a connection."""
    receiver_id: str
    
    @field_validator("receiver_id")
    @classmethod
    def receiver_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Receiver ID required")
        return v


class SharedDepositResponse(DepositResponse):
    """Schema for shared deposit response (receiver's view)."""
    sender_id: str
    receiver_id: str


class SentSharedDepositResponse(CamelModel):
    """Sender's view of a shared deposit; carries no usage state."""
    id: str
    receiver_id: str
    content: str
    emotion: Optional[str] = None
    media_uri: Optional[str] = None
    media_type: Optional[MediaType] = None
    tags: List[str] = []
    created_at: datetime


class SharedDepositUse(CamelModel):
    """Schema for marking a shared deposit as used."""
    helpful: Optional[bool] = None


class SenderSummaryResponse(CamelModel):
    """Aggregated, delayed usage counts for a sender."""
    total_uses: int
    helpful_uses: int
    weeks: int
