"""
Deposit routes: the user's reserve of positive moments.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from reserve.db.session import get_db
from reserve.models.user import User
from reserve.schemas.base import SuccessResponse
from reserve.schemas.deposit import DepositCreate, DepositResponse, DepositUpdate, StatusUpdate
from reserve.api.dependencies import get_current_user
from reserve.core.utils import parse_id_list
from reserve.services import deposit_service
from reserve.services.surfacing_service import surface_deposit

router = APIRouter(prefix="/deposits", tags=["deposits"])


@router.get("", response_model=List[DepositResponse])
async def list_deposits(
    include_inactive: bool = Query(False, alias="includeInactive"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List deposits newest first (inactive ones only with includeInactive=true)."""
    return deposit_service.list_deposits(current_user.id, include_inactive, db)


@router.post("", response_model=DepositResponse, status_code=status.HTTP_201_CREATED)
async def create_deposit(
    payload: DepositCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new deposit."""
    return deposit_service.create_deposit(
        user_id=current_user.id,
        content=payload.content,
        emotion=payload.emotion,
        tags=payload.tags,
        media_uri=payload.media_uri,
        media_type=payload.media_type.value if payload.media_type else None,
        db=db
    )


# Must come before /{deposit_id}
@router.get("/surface", response_model=Optional[DepositResponse])
async def surface(
    exclude: Optional[str] = Query(None, description="Comma-separated deposit ids to skip"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Pick a random active deposit, or null when none is eligible."""
    return surface_deposit(current_user.id, parse_id_list(exclude), db)


@router.get("/{deposit_id}", response_model=DepositResponse)
async def get_deposit(
    deposit_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a single deposit."""
    return deposit_service.get_deposit(deposit_id, current_user.id, db)


@router.patch("/{deposit_id}", response_model=DepositResponse)
async def update_deposit(
    deposit_id: str,
    payload: DepositUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update content, emotion and/or tags."""
    return deposit_service.update_deposit(
        deposit_id, current_user.id, payload.model_dump(exclude_unset=True), db
    )


@router.patch("/{deposit_id}/status", response_model=DepositResponse)
async def update_status(
    deposit_id: str,
    payload: StatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Set the raw status (-1 inactive, 0 active, >0 cooldown days)."""
    return deposit_service.set_status(deposit_id, current_user.id, payload.status, db)


@router.patch("/{deposit_id}/surface", response_model=DepositResponse)
async def mark_surfaced(
    deposit_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark a deposit as surfaced and start its cooldown."""
    return deposit_service.mark_surfaced(deposit_id, current_user.id, db)


@router.delete("/{deposit_id}", response_model=SuccessResponse)
async def delete_deposit(
    deposit_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Soft delete a deposit (status -1)."""
    deposit_service.soft_delete_deposit(deposit_id, current_user.id, db)
    return SuccessResponse(success=True)
