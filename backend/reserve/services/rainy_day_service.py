"""
Rainy day logs and the multi-round session controller.

A session is driven by the caller: every call receives the session state
(target, shown, thumbs up, shown deposit ids) and returns the next state.
Nothing about a session is kept on the server besides the log rows, so an
abandoned session needs no cleanup.
"""
from sqlalchemy.orm import Session
from typing import List, Optional
import enum
import random
import logging
from reserve.core.exceptions import NotFoundError, ValidationError
from reserve.core.utils import merge_ids, utcnow
from reserve.models.deposit import Deposit
from reserve.models.rainy_day import RainyDayLog, VALID_RATINGS
from reserve.models.user import User
from reserve.services.deposit_service import apply_surfaced, get_deposit
from reserve.services.surfacing_service import surface_deposit

logger = logging.getLogger(__name__)


class SessionOutcome(str, enum.Enum):
    """Result of a session call."""
    SHOWING = "showing"  # A deposit is on screen, waiting for a rating
    RATED = "rated"  # Rating stored, target not met yet
    COMPLETE = "complete"  # Target met with at least one positive rating
    EXHAUSTED = "exhausted"  # Ran out of eligible deposits mid-session
    EMPTY = "empty"  # Nothing eligible at session start


class RainyDaySession:
    """Caller-held session state."""
    def __init__(self, target: int = 1, shown: int = 0, thumbs_up: int = 0, exclude_ids: Optional[List[str]] = None):
        self.target = target
        self.shown = shown
        self.thumbs_up = thumbs_up
        self.exclude_ids = list(exclude_ids or [])
    
    def is_complete(self) -> bool:
        return self.shown >= self.target and self.thumbs_up > 0
    
    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "shown": self.shown,
            "thumbs_up": self.thumbs_up,
            "exclude_ids": list(self.exclude_ids),
        }


class SessionStep:
    """One step of a session: the outcome, new state and what to show."""
    def __init__(
        self,
        outcome: SessionOutcome,
        session: RainyDaySession,
        deposit: Optional[Deposit] = None,
        log: Optional[RainyDayLog] = None
    ):
        self.outcome = outcome
        self.session = session
        self.deposit = deposit
        self.log = log


def is_positive(rating: Optional[int]) -> bool:
    return rating is not None and rating > 0


# ---------------------------------------------------------------------------
# Logs
# ---------------------------------------------------------------------------

def _clean_emotion(emotion: Optional[str]) -> str:
    if not emotion or not emotion.strip():
        raise ValidationError("Emotion is required", details={"emotion": "required"})
    return emotion.strip()


def create_log(
    user_id: str,
    emotion: str,
    deposit_id: Optional[str] = None,
    db: Session = None
) -> RainyDayLog:
    """Create a rainy day log; ``deposit_id`` is None when nothing was eligible."""
    emotion = _clean_emotion(emotion)
    if deposit_id is not None:
        get_deposit(deposit_id, user_id, db)
    
    log = RainyDayLog(user_id=user_id, emotion=emotion, deposit_id=deposit_id)
    db.add(log)
    db.commit()
    db.refresh(log)
    return log


def list_logs(user_id: str, db: Session) -> List[RainyDayLog]:
    """List the user's rainy day logs newest first."""
    return db.query(RainyDayLog).filter(
        RainyDayLog.user_id == user_id
    ).order_by(RainyDayLog.created_at.desc()).all()


def get_log(log_id: str, user_id: str, db: Session) -> RainyDayLog:
    log = db.query(RainyDayLog).filter(
        RainyDayLog.id == log_id,
        RainyDayLog.user_id == user_id
    ).first()
    if not log:
        raise NotFoundError("Log not found")
    return log


def validate_rating(rating) -> int:
    if isinstance(rating, bool) or rating not in VALID_RATINGS:
        raise ValidationError(
            "Rating must be 2 (loved it), 1 (helpful), or -1 (not helpful)",
            details={"rating": rating}
        )
    return rating


def record_feedback(log_id: str, user_id: str, changes: dict, db: Session) -> RainyDayLog:
    """
    Patch rating and/or feedback note on a log.
    Keys absent from ``changes`` are left alone; the last write wins.
    """
    if "rating" in changes:
        validate_rating(changes["rating"])
    
    log = get_log(log_id, user_id, db)
    if "rating" in changes:
        log.rating = changes["rating"]
    if "feedback_note" in changes:
        log.feedback_note = changes["feedback_note"]
    
    db.commit()
    db.refresh(log)
    return log


# ---------------------------------------------------------------------------
# Session controller
# ---------------------------------------------------------------------------

def _show_next(
    user_id: str,
    emotion: str,
    session: RainyDaySession,
    db: Session,
    rng: Optional[random.Random]
) -> Optional[SessionStep]:
    emotion = _clean_emotion(emotion)
    deposit = surface_deposit(user_id, session.exclude_ids, db, rng)
    if deposit is None:
        return None
    
    # The log row and the cooldown are committed together
    log = RainyDayLog(user_id=user_id, emotion=emotion, deposit_id=deposit.id)
    try:
        db.add(log)
        if not apply_surfaced(deposit.id, user_id, db, utcnow()):
            raise NotFoundError("Deposit not found")
        db.commit()
    except Exception:
        db.rollback()
        raise
    
    db.refresh(log)
    deposit = get_deposit(deposit.id, user_id, db)
    logger.info(f"Deposit {deposit.id} shown in rainy day session for user {user_id}")
    
    next_session = RainyDaySession(
        target=session.target,
        shown=session.shown + 1,
        thumbs_up=session.thumbs_up,
        exclude_ids=merge_ids(session.exclude_ids, deposit.id)
    )
    return SessionStep(SessionOutcome.SHOWING, next_session, deposit, log)


def start_session(
    user_id: str,
    emotion: str,
    target: Optional[int] = None,
    db: Session = None,
    rng: Optional[random.Random] = None
) -> SessionStep:
    """
    Start a rainy day session and show the first deposit.
    ``target`` defaults to the user's configured moment count.
    """
    if target is None:
        user = db.query(User).filter(User.id == user_id).first()
        target = user.rainy_day_moment_count if user else 1
    if target < 1:
        raise ValidationError("Target must be at least 1", details={"target": target})
    
    session = RainyDaySession(target=target)
    step = _show_next(user_id, emotion, session, db, rng)
    if step is None:
        log = create_log(user_id, emotion, None, db)
        logger.info(f"Rainy day session for user {user_id} found an empty reserve")
        return SessionStep(SessionOutcome.EMPTY, session, None, log)
    
    logger.info(f"Rainy day session started for user {user_id} with target {target}")
    return step


def rate_round(
    user_id: str,
    session: RainyDaySession,
    log_id: str,
    rating: int,
    feedback_note: Optional[str] = None,
    db: Session = None
) -> SessionStep:
    """
    Store the rating of the current round and report whether the session is done.
    
    Only logs of deposits shown in this session can be rated. Re-rating the
    same log replaces its contribution to the thumbs-up count. A note is
    typically attached to a ``-1`` rating but never required.
    """
    validate_rating(rating)
    current = get_log(log_id, user_id, db)
    if current.deposit_id is None or current.deposit_id not in session.exclude_ids:
        raise ValidationError(
            "Log does not belong to this session",
            details={"logId": log_id}
        )
    previous = current.rating
    
    changes = {"rating": rating}
    if feedback_note is not None:
        changes["feedback_note"] = feedback_note
    log = record_feedback(log_id, user_id, changes, db)
    
    thumbs_up = session.thumbs_up
    if is_positive(rating) and not is_positive(previous):
        thumbs_up += 1
    elif is_positive(previous) and not is_positive(rating):
        thumbs_up = max(0, thumbs_up - 1)
    
    rated = RainyDaySession(session.target, session.shown, thumbs_up, session.exclude_ids)
    outcome = SessionOutcome.COMPLETE if rated.is_complete() else SessionOutcome.RATED
    return SessionStep(outcome, rated, None, log)


def advance_session(
    user_id: str,
    emotion: str,
    session: RainyDaySession,
    db: Session = None,
    rng: Optional[random.Random] = None
) -> SessionStep:
    """
    Show the next deposit, excluding every deposit shown so far.
    Ends as ``complete`` when the target is already met and as
    ``exhausted`` when nothing eligible is left, whatever the target.
    """
    if session.is_complete():
        return SessionStep(SessionOutcome.COMPLETE, session)
    
    step = _show_next(user_id, emotion, session, db, rng)
    if step is None:
        logger.info(f"Rainy day session for user {user_id} exhausted after {session.shown} rounds")
        return SessionStep(SessionOutcome.EXHAUSTED, session)
    return step
