"""
Statistics routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from reserve.db.session import get_db
from reserve.models.user import User
from reserve.schemas.deposit import StatsResponse
from reserve.api.dependencies import get_current_user
from reserve.services.stats_service import get_stats

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=StatsResponse)
async def read_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get reserve statistics for the current user."""
    return get_stats(current_user.id, db)
