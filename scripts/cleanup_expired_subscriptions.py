"""
Expire lapsed subscriptions and demote their users. Meant for a cron job.
Run: python -m scripts.cleanup_expired_subscriptions
"""
import logging
import sys

from app.core.config import LOG_LEVEL
from app.core.logging_config import setup_logging
from app.db.session import SessionLocal
from app.services.subscription_service import cleanup_expired_subscriptions

logger = logging.getLogger(__name__)


def main() -> int:
    setup_logging(LOG_LEVEL)
    db = SessionLocal()
    try:
        expired = cleanup_expired_subscriptions(db)
    finally:
        db.close()
    logger.info(f"Cleanup finished: expired={expired}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
