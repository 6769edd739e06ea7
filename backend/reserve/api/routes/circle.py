"""
Circle routes: invites, connections, shared deposits and sender summaries.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from reserve.db.session import get_db
from reserve.models.user import User
from reserve.schemas.base import SuccessResponse
from reserve.schemas.circle import (
    AcceptInviteResponse, ConnectionDetailResponse, ConnectionResponse, InviteCreate,
    InviteDetailResponse, InviteResponse, SenderSummaryResponse, SentSharedDepositResponse,
    SharedDepositCreate, SharedDepositResponse, SharedDepositUse
)
from reserve.api.dependencies import get_current_user
from reserve.core.utils import parse_id_list
from reserve.services import circle_service
from reserve.services.summary_service import sender_summary

router = APIRouter(prefix="/circle", tags=["circle"])


# Invites

@router.post("/invites", response_model=InviteResponse, status_code=status.HTTP_201_CREATED)
async def create_invite(
    payload: InviteCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a Circle invite code."""
    return circle_service.create_invite(
        current_user.id, payload.invite_type, payload.invite_value, db
    )


@router.get("/invites/{code}", response_model=InviteDetailResponse)
async def get_invite(
    code: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Look up a pending invite and who sent it."""
    return circle_service.get_pending_invite(code, db)


@router.post("/invites/{code}/accept", response_model=AcceptInviteResponse)
async def accept_invite(
    code: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Accept an invite, connecting both users."""
    connection = circle_service.accept_invite(code, current_user.id, db)
    return AcceptInviteResponse(success=True, connection=ConnectionResponse.model_validate(connection))


# Connections

@router.get("/connections", response_model=List[ConnectionDetailResponse])
async def list_connections(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the current user's Circle."""
    return circle_service.list_connections(current_user.id, db)


@router.delete("/connections/{connection_id}", response_model=SuccessResponse)
async def remove_connection(
    connection_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a connection in both directions."""
    circle_service.remove_connection(connection_id, current_user.id, db)
    return SuccessResponse(success=True)


# Shared deposits

@router.post("/shared-deposits", response_model=SharedDepositResponse, status_code=status.HTTP_201_CREATED)
async def share_deposit(
    payload: SharedDepositCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Send a deposit to a connection."""
    return circle_service.share_deposit(
        sender_id=current_user.id,
        receiver_id=payload.receiver_id,
        content=payload.content,
        emotion=payload.emotion,
        tags=payload.tags,
        media_uri=payload.media_uri,
        media_type=payload.media_type.value if payload.media_type else None,
        db=db
    )


@router.get("/shared-deposits/received", response_model=List[SharedDepositResponse])
async def list_received(
    include_inactive: bool = Query(False, alias="includeInactive"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List shared deposits received by the current user."""
    return circle_service.list_received(current_user.id, include_inactive, db)


@router.get("/shared-deposits/sent", response_model=List[SentSharedDepositResponse])
async def list_sent(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List shared deposits sent by the current user (without usage state)."""
    return circle_service.list_sent(current_user.id, db)


@router.get("/shared-deposits/surface", response_model=Optional[SharedDepositResponse])
async def surface_shared(
    exclude: Optional[str] = Query(None, description="Comma-separated shared deposit ids to skip"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Pick a random active shared deposit, or null."""
    return circle_service.surface_for_receiver(current_user.id, parse_id_list(exclude), db)


@router.post("/shared-deposits/{shared_id}/use", response_model=SharedDepositResponse)
async def use_shared(
    shared_id: str,
    payload: Optional[SharedDepositUse] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark a received shared deposit as used, with optional helpfulness."""
    helpful = payload.helpful if payload else None
    return circle_service.use_shared_deposit(shared_id, current_user.id, helpful, db)


@router.delete("/shared-deposits/{shared_id}", response_model=SuccessResponse)
async def delete_shared(
    shared_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Soft delete a received shared deposit."""
    circle_service.soft_delete_shared(shared_id, current_user.id, db)
    return SuccessResponse(success=True)


# Summary

@router.get("/summary", response_model=SenderSummaryResponse)
async def get_summary(
    weeks: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """How often the current user's shared deposits were used recently."""
    return sender_summary(current_user.id, weeks, db)
