"""
User identity and settings routes.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from reserve.db.session import get_db
from reserve.schemas.user import CurrentUserRequest, UserResponse, UserSession, UserSettingsUpdate
from reserve.models.user import User
from reserve.core.config import settings
from reserve.core.security import create_access_token
from reserve.api.dependencies import get_current_user
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

PROFILE_FIELDS = ("display_name", "email", "phone")


@router.post("/current", response_model=UserSession)
async def get_or_create_current_user(
    payload: CurrentUserRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """Get or create the user bound to a device id and issue a token."""
    user = db.query(User).filter(User.device_id == payload.device_id).first()
    
    if user:
        # Update profile info if provided
        for field in PROFILE_FIELDS:
            value = getattr(payload, field)
            if value:
                setattr(user, field, value)
        db.commit()
        db.refresh(user)
    else:
        user = User(
            device_id=payload.device_id,
            display_name=payload.display_name,
            email=payload.email,
            phone=payload.phone,
            summary_frequency_weeks=settings.DEFAULT_SUMMARY_WEEKS,
            rainy_day_moment_count=settings.DEFAULT_MOMENT_COUNT
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        response.status_code = status.HTTP_201_CREATED
        logger.info(f"Registered user {user.id}")
    
    access_token = create_access_token(data={"sub": user.id})
    return UserSession(user=UserResponse.model_validate(user), access_token=access_token)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return current_user


@router.patch("/me/settings", response_model=UserResponse)
async def update_settings(
    payload: UserSettingsUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update summary frequency, moment count and profile fields."""
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field in ("summary_frequency_weeks", "rainy_day_moment_count"):
            continue
        setattr(current_user, field, value)
    
    db.commit()
    db.refresh(current_user)
    return current_user
