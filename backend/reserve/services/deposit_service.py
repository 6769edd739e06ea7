"""
Deposit store: data access and status lifecycle for a user's deposits.

Status values: ``0`` active, ``>0`` cooldown in days, ``-1`` inactive.
A cooldown runs from ``cooldown_started_at``. Only ``mark_surfaced`` moves
a deposit into cooldown as a side effect of surfacing; every other status
change goes through ``set_status``.
"""
from sqlalchemy import case
from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from typing import List, Optional
import logging
from reserve.core.config import settings
from reserve.core.exceptions import NotFoundError, ValidationError
from reserve.core.utils import utcnow
from reserve.models.deposit import Deposit, STATUS_ACTIVE, STATUS_INACTIVE

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = ("content", "emotion", "tags")


def get_deposit(deposit_id: str, user_id: str, db: Session) -> Deposit:
    """Get a deposit owned by the user or raise NotFoundError."""
    deposit = db.query(Deposit).filter(
        Deposit.id == deposit_id,
        Deposit.user_id == user_id
    ).first()
    if not deposit:
        raise NotFoundError("Deposit not found")
    return deposit


def create_deposit(
    user_id: str,
    content: str,
    emotion: Optional[str] = None,
    tags: Optional[List[str]] = None,
    media_uri: Optional[str] = None,
    media_type: Optional[str] = None,
    db: Session = None
) -> Deposit:
    """Create a new deposit. New deposits are always active."""
    if not content or not content.strip():
        raise ValidationError("Content must not be empty", details={"content": "required"})
    
    deposit = Deposit(
        user_id=user_id,
        content=content,
        emotion=emotion,
        tags=list(tags or []),
        media_uri=media_uri,
        media_type=media_type,
        status=STATUS_ACTIVE
    )
    db.add(deposit)
    db.commit()
    db.refresh(deposit)
    
    logger.info(f"Created deposit {deposit.id} for user {user_id}")
    return deposit


def list_deposits(user_id: str, include_inactive: bool = False, db: Session = None) -> List[Deposit]:
    """
    List deposits newest first.
    Cooldown deposits are always listed; inactive ones only on request.
    """
    query = db.query(Deposit).filter(Deposit.user_id == user_id)
    if not include_inactive:
        query = query.filter(Deposit.status != STATUS_INACTIVE)
    return query.order_by(Deposit.created_at.desc()).all()


def update_deposit(deposit_id: str, user_id: str, changes: dict, db: Session) -> Deposit:
    """Apply a partial update of content, emotion and/or tags."""
    deposit = get_deposit(deposit_id, user_id, db)
    
    for field in MUTABLE_FIELDS:
        if field not in changes:
            continue
        value = changes[field]
        if field == "content" and (value is None or not value.strip()):
            raise ValidationError("Content must not be empty", details={"content": "required"})
        if field == "tags":
            value = list(value or [])
        setattr(deposit, field, value)
    
    db.commit()
    db.refresh(deposit)
    return deposit


def validate_status(status) -> int:
    """
    Check a raw status value.
    Accepts integers in [-1, MAX_COOLDOWN_DAYS]; anything else is rejected.
    """
    if isinstance(status, bool) or not isinstance(status, int):
        raise ValidationError("Status must be a number", details={"status": "integer required"})
    if status < STATUS_INACTIVE or status > settings.MAX_COOLDOWN_DAYS:
        raise ValidationError(
            f"Status must be between {STATUS_INACTIVE} and {settings.MAX_COOLDOWN_DAYS}",
            details={"status": status}
        )
    return status


def cooldown_values(model, days: int, now: datetime) -> dict:
    """
    UPDATE values that start a ``days`` cooldown at ``now``.
    Inactive records keep ``-1``; a surfacing never revives them.
    """
    return {
        model.status: case((model.status == STATUS_INACTIVE, STATUS_INACTIVE), else_=days),
        model.cooldown_started_at: now,
    }


def set_status(
    deposit_id: str,
    user_id: str,
    status: int,
    db: Session,
    now: Optional[datetime] = None
) -> Deposit:
    """
    Set the raw status of a deposit in a single update.
    A positive status starts a fresh cooldown of that many days.
    """
    status = validate_status(status)
    
    updated = db.query(Deposit).filter(
        Deposit.id == deposit_id,
        Deposit.user_id == user_id
    ).update(
        {
            Deposit.status: status,
            Deposit.cooldown_started_at: (now or utcnow()) if status > 0 else None,
        },
        synchronize_session=False
    )
    
    if not updated:
        db.rollback()
        raise NotFoundError("Deposit not found")
    
    db.commit()
    logger.info(f"Set status of deposit {deposit_id} to {status}")
    return get_deposit(deposit_id, user_id, db)


def soft_delete_deposit(deposit_id: str, user_id: str, db: Session) -> Deposit:
    """Mark a deposit inactive. The record is never removed."""
    return set_status(deposit_id, user_id, STATUS_INACTIVE, db)


def apply_surfaced(deposit_id: str, user_id: str, db: Session, now: datetime) -> int:
    """
    Stamp ``last_surfaced_at`` and start the surfacing cooldown without committing.
    Returns the number of rows matched.
    """
    values = cooldown_values(Deposit, settings.SURFACE_COOLDOWN_DAYS, now)
    values[Deposit.last_surfaced_at] = now
    return db.query(Deposit).filter(
        Deposit.id == deposit_id,
        Deposit.user_id == user_id
    ).update(values, synchronize_session=False)


def mark_surfaced(
    deposit_id: str,
    user_id: str,
    db: Session,
    now: Optional[datetime] = None
) -> Deposit:
    """
    Record that a deposit was shown and start its cooldown.
    
    ``last_surfaced_at`` and ``status`` are written by one UPDATE statement,
    so concurrent callers never observe one without the other.
    """
    if not apply_surfaced(deposit_id, user_id, db, now or utcnow()):
        db.rollback()
        raise NotFoundError("Deposit not found")
    
    db.commit()
    logger.info(f"Deposit {deposit_id} surfaced, cooldown {settings.SURFACE_COOLDOWN_DAYS} days")
    return get_deposit(deposit_id, user_id, db)


def release_expired_cooldowns(model=Deposit, db: Session = None, now: Optional[datetime] = None) -> int:
    """
    Return cooled-down records to active once their cooldown has elapsed.
    
    A record is released when ``cooldown_started_at + status days <= now``.
    Records in cooldown without a start time are left alone. Works for any
    model with deposit status columns. Returns the number of records released.
    """
    now = now or utcnow()
    candidates = db.query(model).filter(
        model.status > 0,
        model.cooldown_started_at.isnot(None)
    ).all()
    
    released = 0
    for record in candidates:
        if record.cooldown_started_at + timedelta(days=record.status) <= now:
            record.status = STATUS_ACTIVE
            record.cooldown_started_at = None
            released += 1
    
    db.commit()
    if released:
        logger.info(f"Released {released} {model.__tablename__} from cooldown")
    return released
