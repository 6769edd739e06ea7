"""
Reserve statistics for the history screen.
"""
from sqlalchemy.orm import Session
from reserve.models.deposit import Deposit, STATUS_ACTIVE, STATUS_INACTIVE
from reserve.models.rainy_day import RainyDayLog
from reserve.services.circle_service import count_connections


def get_stats(user_id: str, db: Session) -> dict:
    """Counts of deposits by state, rainy days and Circle connections."""
    statuses = [
        status for (status,) in db.query(Deposit.status).filter(
            Deposit.user_id == user_id,
            Deposit.status != STATUS_INACTIVE
        ).all()
    ]
    
    return {
        "total_deposits": len(statuses),
        "active_deposits": sum(1 for s in statuses if s == STATUS_ACTIVE),
        "cooldown_deposits": sum(1 for s in statuses if s > 0),
        "total_rainy_days": db.query(RainyDayLog).filter(RainyDayLog.user_id == user_id).count(),
        "connections": count_connections(user_id, db),
    }
