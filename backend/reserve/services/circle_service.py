"""
Circle service: invites, bi-directional connections and shared deposits.
"""
from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from datetime import datetime, timedelta
from typing import Iterable, List, Optional
import random
import logging
from reserve.core.config import settings
from reserve.core.exceptions import (
    AlreadyConnectedError, ForbiddenError, InviteExpiredError,
    InviteUnavailableError, NotFoundError, SelfInviteError, ValidationError
)
from reserve.core.security import generate_invite_code
from reserve.core.utils import utcnow
from reserve.models.circle import (
    CircleInvite, Connection, ConnectionStatus, InviteStatus,
    SharedDeposit, SharedDepositUsage
)
from reserve.models.deposit import STATUS_ACTIVE, STATUS_INACTIVE
from reserve.services.surfacing_service import surface_shared_deposit
from reserve.services.deposit_service import cooldown_values

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Invites
# ---------------------------------------------------------------------------

def create_invite(
    sender_id: str,
    invite_type: str,
    invite_value: Optional[str] = None,
    db: Session = None,
    now: Optional[datetime] = None
) -> CircleInvite:
    """Create a pending invite that expires after INVITE_EXPIRE_DAYS."""
    now = now or utcnow()
    invite = CircleInvite(
        sender_id=sender_id,
        invite_type=invite_type,
        invite_value=invite_value or None,
        invite_code=generate_invite_code(),
        status=InviteStatus.PENDING,
        expires_at=now + timedelta(days=settings.INVITE_EXPIRE_DAYS)
    )
    db.add(invite)
    db.commit()
    db.refresh(invite)
    
    logger.info(f"User {sender_id} created invite {invite.id}")
    return invite


def get_pending_invite(code: str, db: Session, now: Optional[datetime] = None) -> CircleInvite:
    """
    Look up a usable invite by code.
    A pending invite found past its expiry is marked expired before failing.
    """
    now = now or utcnow()
    invite = db.query(CircleInvite).options(
        joinedload(CircleInvite.sender)
    ).filter(CircleInvite.invite_code == code).first()
    
    if not invite:
        raise NotFoundError("Invite not found")
    
    if invite.status != InviteStatus.PENDING:
        raise InviteUnavailableError("Invite already used or expired")
    
    if invite.expires_at and now > invite.expires_at:
        invite.status = InviteStatus.EXPIRED
        db.commit()
        logger.info(f"Invite {invite.id} expired")
        raise InviteExpiredError("Invite expired")
    
    return invite


def _connection_between(user_a: str, user_b: str):
    return or_(
        and_(Connection.user_id == user_a, Connection.connected_user_id == user_b),
        and_(Connection.user_id == user_b, Connection.connected_user_id == user_a)
    )


def accept_invite(code: str, user_id: str, db: Session, now: Optional[datetime] = None) -> Connection:
    """
    Accept an invite and connect both users.
    
    Both connection rows and the invite status change are committed together;
    a concurrent accept of the same pair fails on the unique constraint and
    is reported as AlreadyConnectedError.
    """
    now = now or utcnow()
    invite = get_pending_invite(code, db, now)
    sender_id = invite.sender_id
    
    if sender_id == user_id:
        raise SelfInviteError("Cannot accept your own invite")
    
    existing = db.query(Connection).filter(_connection_between(sender_id, user_id)).first()
    if existing:
        raise AlreadyConnectedError("Already connected")
    
    forward = Connection(
        user_id=sender_id,
        connected_user_id=user_id,
        status=ConnectionStatus.ACCEPTED,
        accepted_at=now
    )
    backward = Connection(
        user_id=user_id,
        connected_user_id=sender_id,
        status=ConnectionStatus.ACCEPTED,
        accepted_at=now
    )
    db.add(forward)
    db.add(backward)
    invite.status = InviteStatus.ACCEPTED
    
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyConnectedError("Already connected")
    
    db.refresh(forward)
    logger.info(f"Users {sender_id} and {user_id} connected")
    return forward


# ---------------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------------

def list_connections(user_id: str, db: Session) -> List[Connection]:
    """List the user's accepted connections."""
    return db.query(Connection).options(
        joinedload(Connection.connected_user)
    ).filter(
        Connection.user_id == user_id,
        Connection.status == ConnectionStatus.ACCEPTED
    ).order_by(Connection.created_at).all()


def count_connections(user_id: str, db: Session) -> int:
    return db.query(Connection).filter(
        Connection.user_id == user_id,
        Connection.status == ConnectionStatus.ACCEPTED
    ).count()


def remove_connection(connection_id: str, user_id: str, db: Session) -> None:
    """Delete both directions of a connection the user is part of."""
    connection = db.query(Connection).filter(Connection.id == connection_id).first()
    if not connection or user_id not in (connection.user_id, connection.connected_user_id):
        raise NotFoundError("Connection not found")
    
    user_a, user_b = connection.user_id, connection.connected_user_id
    db.query(Connection).filter(
        _connection_between(user_a, user_b)
    ).delete(synchronize_session=False)
    db.commit()
    
    logger.info(f"Users {user_a} and {user_b} disconnected")


def is_connected(sender_id: str, receiver_id: str, db: Session) -> bool:
    """Whether an accepted connection exists from sender to receiver."""
    return db.query(Connection).filter(
        Connection.user_id == sender_id,
        Connection.connected_user_id == receiver_id,
        Connection.status == ConnectionStatus.ACCEPTED
    ).first() is not None


# ---------------------------------------------------------------------------
# Shared deposits
# ---------------------------------------------------------------------------

def share_deposit(
    sender_id: str,
    receiver_id: str,
    content: str,
    emotion: Optional[str] = None,
    tags: Optional[List[str]] = None,
    media_uri: Optional[str] = None,
    media_type: Optional[str] = None,
    db: Session = None
) -> SharedDeposit:
    """Send a deposit to a connection. Shared deposits always start active."""
    if not content or not content.strip():
        raise ValidationError("Content must not be empty", details={"content": "required"})
    if not is_connected(sender_id, receiver_id, db):
        raise ForbiddenError("Not connected to this user")
    
    shared = SharedDeposit(
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        emotion=emotion,
        tags=list(tags or []),
        media_uri=media_uri,
        media_type=media_type,
        status=STATUS_ACTIVE
    )
    db.add(shared)
    db.commit()
    db.refresh(shared)
    
    logger.info(f"User {sender_id} shared deposit {shared.id}")
    return shared


def list_received(user_id: str, include_inactive: bool = False, db: Session = None) -> List[SharedDeposit]:
    """List shared deposits received by the user, newest first."""
    query = db.query(SharedDeposit).filter(SharedDeposit.receiver_id == user_id)
    if not include_inactive:
        query = query.filter(SharedDeposit.status != STATUS_INACTIVE)
    return query.order_by(SharedDeposit.created_at.desc()).all()


def list_sent(user_id: str, db: Session) -> List[SharedDeposit]:
    """List shared deposits sent by the user, newest first."""
    return db.query(SharedDeposit).filter(
        SharedDeposit.sender_id == user_id
    ).order_by(SharedDeposit.created_at.desc()).all()


def get_received(shared_id: str, user_id: str, db: Session) -> SharedDeposit:
    """Get a shared deposit the user received or raise NotFoundError."""
    shared = db.query(SharedDeposit).filter(
        SharedDeposit.id == shared_id,
        SharedDeposit.receiver_id == user_id
    ).first()
    if not shared:
        raise NotFoundError("Shared deposit not found")
    return shared


def surface_for_receiver(
    user_id: str,
    exclude_ids: Optional[Iterable[str]] = None,
    db: Session = None,
    rng: Optional[random.Random] = None
) -> Optional[SharedDeposit]:
    """Pick a random active shared deposit received by the user."""
    return surface_shared_deposit(user_id, exclude_ids, db, rng)


def use_shared_deposit(
    shared_id: str,
    user_id: str,
    helpful: Optional[bool] = None,
    db: Session = None,
    now: Optional[datetime] = None
) -> SharedDeposit:
    """
    Mark a received shared deposit as used.
    
    Starts the cooldown and appends a usage row in one transaction. The
    sender is not notified; usage only reaches them through sender summaries.
    """
    now = now or utcnow()
    values = cooldown_values(SharedDeposit, settings.SURFACE_COOLDOWN_DAYS, now)
    values[SharedDeposit.last_surfaced_at] = now
    updated = db.query(SharedDeposit).filter(
        SharedDeposit.id == shared_id,
        SharedDeposit.receiver_id == user_id
    ).update(values, synchronize_session=False)
    
    if not updated:
        db.rollback()
        raise NotFoundError("Shared deposit not found")
    
    db.add(SharedDepositUsage(shared_deposit_id=shared_id, used_at=now, helpful=helpful))
    db.commit()
    
    logger.info(f"Shared deposit {shared_id} used")
    return get_received(shared_id, user_id, db)


def soft_delete_shared(shared_id: str, user_id: str, db: Session) -> SharedDeposit:
    """Mark a received shared deposit inactive."""
    shared = get_received(shared_id, user_id, db)
    shared.status = STATUS_INACTIVE
    shared.cooldown_started_at = None
    db.commit()
    db.refresh(shared)
    return shared
