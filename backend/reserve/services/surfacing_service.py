"""
Surfacing engine: uniform random selection among eligible deposits.

Selection is a pure read. Callers commit the cooldown themselves
(``mark_surfaced`` / ``use_shared_deposit``) once a deposit is used.
Exclusion lists are cumulative per session and owned by the caller.
"""
from sqlalchemy.orm import Session
from typing import Iterable, List, Optional, Sequence
import random
import logging
from reserve.models.deposit import Deposit, STATUS_ACTIVE
from reserve.models.circle import SharedDeposit

logger = logging.getLogger(__name__)


def pick_uniform(candidates: Sequence, rng: Optional[random.Random] = None):
    """Choose one candidate uniformly at random, or None when there are none."""
    if not candidates:
        return None
    return (rng or random).choice(candidates)


def _eligible(query, model, exclude_ids: Optional[Iterable[str]]):
    query = query.filter(model.status == STATUS_ACTIVE)
    exclude = [i for i in (exclude_ids or []) if i]
    if exclude:
        query = query.filter(~model.id.in_(exclude))
    return query.order_by(model.id).all()


def eligible_deposits(
    user_id: str,
    exclude_ids: Optional[Iterable[str]] = None,
    db: Session = None
) -> List[Deposit]:
    """Active deposits of the user that are not excluded."""
    query = db.query(Deposit).filter(Deposit.user_id == user_id)
    return _eligible(query, Deposit, exclude_ids)


def surface_deposit(
    user_id: str,
    exclude_ids: Optional[Iterable[str]] = None,
    db: Session = None,
    rng: Optional[random.Random] = None
) -> Optional[Deposit]:
    """Pick a random eligible deposit, or None when the reserve is empty."""
    candidates = eligible_deposits(user_id, exclude_ids, db)
    deposit = pick_uniform(candidates, rng)
    if deposit is None:
        logger.info(f"No eligible deposit for user {user_id}")
    else:
        logger.debug(f"Picked deposit {deposit.id} out of {len(candidates)} candidates")
    return deposit


def eligible_shared_deposits(
    receiver_id: str,
    exclude_ids: Optional[Iterable[str]] = None,
    db: Session = None
) -> List[SharedDeposit]:
    """Active shared deposits received by the user that are not excluded."""
    query = db.query(SharedDeposit).filter(SharedDeposit.receiver_id == receiver_id)
    return _eligible(query, SharedDeposit, exclude_ids)


def surface_shared_deposit(
    receiver_id: str,
    exclude_ids: Optional[Iterable[str]] = None,
    db: Session = None,
    rng: Optional[random.Random] = None
) -> Optional[SharedDeposit]:
    """Pick a random eligible shared deposit for the receiver."""
    return pick_uniform(eligible_shared_deposits(receiver_id, exclude_ids, db), rng)
