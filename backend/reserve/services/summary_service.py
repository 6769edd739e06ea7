"""
Sender summaries: aggregated usage counts of a user's shared deposits.

Senders only ever see counts over a window of whole weeks; individual
usage rows and their timestamps are never exposed.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
import logging
from reserve.core.config import settings
from reserve.core.exceptions import ValidationError
from reserve.core.utils import utcnow
from reserve.models.circle import SharedDeposit, SharedDepositUsage
from reserve.models.user import User

logger = logging.getLogger(__name__)


def sender_summary(
    user_id: str,
    weeks_back: Optional[int] = None,
    db: Session = None,
    now: Optional[datetime] = None
) -> dict:
    """
    Count uses of the user's shared deposits in the last ``weeks_back`` weeks.
    Returns zero counts when the user has not shared anything.
    """
    if weeks_back is None:
        weeks_back = settings.DEFAULT_SUMMARY_WEEKS
    if isinstance(weeks_back, bool) or not isinstance(weeks_back, int) or weeks_back < 1:
        raise ValidationError("Weeks must be a positive integer", details={"weeks": weeks_back})
    
    now = now or utcnow()
    cutoff = now - timedelta(days=weeks_back * 7)
    
    sent_ids = db.query(SharedDeposit.id).filter(SharedDeposit.sender_id == user_id)
    in_window = db.query(func.count(SharedDepositUsage.id)).filter(
        SharedDepositUsage.shared_deposit_id.in_(sent_ids.scalar_subquery()),
        SharedDepositUsage.used_at >= cutoff
    )
    
    total_uses = in_window.scalar() or 0
    helpful_uses = in_window.filter(SharedDepositUsage.helpful.is_(True)).scalar() or 0
    
    return {
        "total_uses": total_uses,
        "helpful_uses": helpful_uses,
        "weeks": weeks_back,
    }


def is_summary_due(user: User, now: datetime) -> bool:
    """Whether the user's summary cadence has elapsed since the last one."""
    if user.last_summary_sent_at is None:
        return True
    return now - user.last_summary_sent_at >= timedelta(weeks=user.summary_frequency_weeks)


def collect_due_summaries(db: Session, now: Optional[datetime] = None) -> List[Tuple[User, dict]]:
    """
    Build summaries for every sender whose cadence has elapsed.
    
    Each summary covers the sender's own cadence window. The users'
    ``last_summary_sent_at`` is stamped; delivering the summaries is up to
    the caller.
    """
    now = now or utcnow()
    sender_ids = db.query(SharedDeposit.sender_id).distinct()
    senders = db.query(User).filter(User.id.in_(sender_ids.scalar_subquery())).all()
    
    due = []
    for user in senders:
        if not is_summary_due(user, now):
            continue
        summary = sender_summary(user.id, user.summary_frequency_weeks, db, now)
        user.last_summary_sent_at = now
        due.append((user, summary))
    
    db.commit()
    logger.info(f"Collected {len(due)} sender summaries")
    return due
