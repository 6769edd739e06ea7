"""
Build sender summaries for every user whose summary cadence has elapsed.
Delivery is left to the notification channel; this script logs the counts.
"""
import sys
import os
import logging

# Add the backend directory to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from reserve.db.session import SessionLocal
from reserve.services.summary_service import collect_due_summaries

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def send():
    """Collect due summaries and hand them to the notifier."""
    db = SessionLocal()
    try:
        for user, summary in collect_due_summaries(db):
            logger.info(
                f"Summary for user {user.id}: {summary['total_uses']} uses, "
                f"{summary['helpful_uses']} helpful in the last {summary['weeks']} weeks"
            )
    except Exception:
        db.rollback()
        logger.exception("Collecting summaries failed")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    send()
