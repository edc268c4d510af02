"""
Expire subscriptions: every run, mark active subscriptions whose end_date has passed as expired
so the booking engine stops accepting sessions on them.
"""
import logging

from gymapp.db.session import SessionLocal
from gymapp.services.subscription_service import expire_subscriptions

logger = logging.getLogger(__name__)


def run_subscription_expiry_job() -> None:
    db = SessionLocal()
    try:
        expired = expire_subscriptions(db)
        if expired:
            logger.info("Subscription expiry job: %s subscriptions expired", expired)
        else:
            logger.debug("Subscription expiry job: nothing to expire")
    except Exception as e:
        logger.exception("Subscription expiry job failed: %s", e)
        db.rollback()
    finally:
        db.close()
