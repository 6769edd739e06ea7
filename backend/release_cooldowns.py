"""
Return deposits and shared deposits to active once their cooldown has elapsed.
Run periodically (e.g. daily from cron).
"""
import sys
import os
import logging

# Add the backend directory to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from reserve.db.session import SessionLocal
from reserve.models import Deposit, SharedDeposit
from reserve.services.deposit_service import release_expired_cooldowns

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def release():
    """Release expired cooldowns on both deposit tables."""
    db = SessionLocal()
    try:
        released = release_expired_cooldowns(Deposit, db)
        released_shared = release_expired_cooldowns(SharedDeposit, db)
        logger.info(f"Released {released} deposits and {released_shared} shared deposits")
    except Exception:
        db.rollback()
        logger.exception("Releasing cooldowns failed")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    release()
